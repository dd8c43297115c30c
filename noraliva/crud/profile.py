from sqlalchemy.orm import Session
from noraliva.models import Profile
from noraliva.schemas import ProfileCreate
from typing import List, Optional

def create_profile(db: Session, profile: ProfileCreate) -> Profile:
    """Create a new parent or learner profile"""
    db_profile = Profile(**profile.model_dump())
    db.add(db_profile)
    db.commit()
    db.refresh(db_profile)
    return db_profile

def get_profile(db: Session, profile_id: int) -> Optional[Profile]:
    """Get profile by ID"""
    return db.query(Profile).filter(Profile.id == profile_id).first()

def get_profile_by_slug(db: Session, slug: str) -> Optional[Profile]:
    return db.query(Profile).filter(Profile.slug == slug.lower()).first()

def list_children(db: Session, parent_id: int) -> List[Profile]:
    """Get learner profiles linked to a parent"""
    return db.query(Profile).filter(
        Profile.parent_id == parent_id
    ).order_by(Profile.id).all()
