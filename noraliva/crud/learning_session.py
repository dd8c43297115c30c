from sqlalchemy.orm import Session
from noraliva.models import LearningSession
from noraliva.database import utcnow
from typing import List, Optional

def start_learning_session(db: Session, learner_id: int, domain: str) -> LearningSession:
    """Open an active practice session"""
    session = LearningSession(learner_id=learner_id, domain=domain, status="active")
    db.add(session)
    db.commit()
    db.refresh(session)
    return session

def end_learning_session(db: Session, session_id: int, learner_id: int) -> Optional[LearningSession]:
    """Mark a learner's session completed; None if the session is not theirs or missing"""
    session = db.query(LearningSession).filter(
        LearningSession.id == session_id,
        LearningSession.learner_id == learner_id
    ).first()
    if session:
        session.status = "completed"
        session.ended_at = utcnow()
        db.commit()
        db.refresh(session)
    return session

def get_learning_sessions(db: Session, learner_id: int, limit: int = 50) -> List[LearningSession]:
    """Get recent sessions for a learner"""
    return db.query(LearningSession).filter(
        LearningSession.learner_id == learner_id
    ).order_by(LearningSession.started_at.desc(), LearningSession.id.desc()).limit(limit).all()
