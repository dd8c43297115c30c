import logging
from typing import Optional

from langchain_anthropic import ChatAnthropic
from langchain_core.output_parsers import StrOutputParser
from langchain_core.prompts import ChatPromptTemplate
from langchain_ollama import ChatOllama

from noraliva.config import settings
from noraliva.learners import LearnerProfile, get_learner_profile

logger = logging.getLogger(__name__)

FALLBACK_ANSWER = "Let's think about that together!"

FEELING_SCRIPTS = {
    "frustrated": "You're safe. We can do hard things.\n\nPick one:\n1) Try a smaller one\n2) Take a quick win",
    "dont_know": "Totally okay. Not knowing is the start.\n\nWant a hint first, or want me to walk you through it?",
    "too_easy": "Nice. That means you're ready for a harder one.\n\nAfter this, I'll give you a \"boss\" version.",
    "too_hard": "Got it. Let's make it smaller.\n\nWe'll do fewer questions and end with a celebration win.",
}


def get_ace():
    """Factory function to return the Ace agent for the configured provider"""
    if settings.ai_provider.lower() == "claude":
        return ClaudeAce()
    else:
        return OllamaAce()


def feeling_reply(feeling: str) -> str:
    """Scripted reply when a learner reports how a question feels"""
    try:
        return FEELING_SCRIPTS[feeling]
    except KeyError:
        raise ValueError(f"Unknown feeling '{feeling}'. Expected one of: {', '.join(FEELING_SCRIPTS)}")


class BaseAce:
    """Ace, the warm and curious learning companion"""

    def __init__(self):
        self.llm = None
        self.parser = StrOutputParser()

    def ask(self, question: str, learner: Optional[LearnerProfile] = None) -> str:
        """
        Answer a learner's question at their grade level.

        Args:
            question: What the child asked
            learner: Profile used to pitch the reply; defaults to the generic learner

        Returns:
            Ace's reply, or a gentle fallback when the model returns nothing
        """
        learner = learner or get_learner_profile(None)

        prompt = ChatPromptTemplate.from_messages([
            ("system", self._build_system_prompt(learner)),
            ("human", "{question}")
        ])

        chain = prompt | self.llm | self.parser

        answer = chain.invoke({"question": question})
        logger.debug("Ace answered %s (%d chars)", learner.display_name, len(answer or ""))

        answer = (answer or "").strip()
        return answer or FALLBACK_ANSWER

    def _build_system_prompt(self, learner: LearnerProfile) -> str:
        """Build system prompt for LLM"""
        return f"""You are Ace, a learning companion for children.
You are talking with {learner.display_name}. Respond at a {learner.grade_label} level.
Be warm, short, and curious. Never make the child feel bad for not knowing.
Prefer hints and questions that help them think over giving the answer away."""


class OllamaAce(BaseAce):
    """Ace using local Ollama for development"""

    def __init__(self):
        super().__init__()
        self.llm = ChatOllama(
            model=settings.ollama_model,
            base_url=settings.ollama_base_url,
            temperature=0.3
        )


class ClaudeAce(BaseAce):
    """Ace using Claude API for production"""

    def __init__(self):
        super().__init__()
        if not settings.claude_api_key:
            raise ValueError("CLAUDE_API_KEY not set in environment variables")

        self.llm = ChatAnthropic(
            model=settings.claude_model,
            api_key=settings.claude_api_key,
            temperature=0.3
        )
