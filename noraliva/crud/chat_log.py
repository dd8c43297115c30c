from sqlalchemy.orm import Session
from noraliva.models import ChatLog
from typing import List

def log_chat_message(db: Session, learner_id: int, role: str, content: str) -> ChatLog:
    """Store one message of a conversation with Ace"""
    if role not in ("user", "assistant"):
        raise ValueError(f"Invalid chat role '{role}'. Use 'user' or 'assistant'")

    message = ChatLog(learner_id=learner_id, role=role, content=content)
    db.add(message)
    db.commit()
    db.refresh(message)
    return message

def get_chat_history(db: Session, learner_id: int, limit: int = 20) -> List[ChatLog]:
    """Most recent messages, oldest first"""
    rows = db.query(ChatLog).filter(
        ChatLog.learner_id == learner_id
    ).order_by(ChatLog.created_at.desc(), ChatLog.id.desc()).limit(limit).all()
    return list(reversed(rows))
