"""
Construction of the analysis pipeline from settings
"""
from typing import Optional
import openai
import structlog

from jobboard.analysis.ai_analyzer import AIAnalyzer
from jobboard.analysis.extractor import TextExtractor
from jobboard.analysis.heuristic import HeuristicAnalyzer
from jobboard.analysis.orchestrator import AnalysisOrchestrator
from jobboard.core.config import Settings, settings as default_settings
from jobboard.core.database import SessionLocal
from jobboard.core.storage import LocalFileStorage

logger = structlog.get_logger()


def build_ai_analyzer(config: Settings) -> Optional[AIAnalyzer]:
    """AI analyzer when a credential is configured, None for heuristic-only mode"""
    if not config.ai_enabled:
        logger.info("ai_analyzer_disabled", reason="no_api_key")
        return None

    client = openai.OpenAI(
        api_key=config.OPENAI_API_KEY,
        base_url=config.OPENAI_BASE_URL or None,
        timeout=config.AI_REQUEST_TIMEOUT_SECONDS,
        max_retries=config.AI_MAX_RETRIES,
    )
    logger.info("ai_analyzer_enabled", model=config.OPENAI_MODEL, base_url=config.OPENAI_BASE_URL)
    return AIAnalyzer(
        client,
        model=config.OPENAI_MODEL,
        temperature=config.AI_TEMPERATURE,
        max_tokens=config.AI_MAX_TOKENS,
        max_input_chars=config.AI_MAX_INPUT_CHARS,
    )


def build_orchestrator(config: Optional[Settings] = None, ai_analyzer: Optional[AIAnalyzer] = None) -> AnalysisOrchestrator:
    """Wire the orchestrator; an explicit analyzer overrides the settings"""
    config = config or default_settings
    if ai_analyzer is None:
        ai_analyzer = build_ai_analyzer(config)

    return AnalysisOrchestrator(
        session_factory=SessionLocal,
        storage=LocalFileStorage(config.UPLOAD_DIR),
        extractor=TextExtractor(),
        heuristic=HeuristicAnalyzer(),
        ai_analyzer=ai_analyzer,
        min_text_length=config.MIN_EXTRACTED_TEXT_LENGTH,
    )
