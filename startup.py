import logging
import os
import sys

import uvicorn

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)
logger = logging.getLogger(__name__)

# Allow running from a checkout without installing the package
current_dir = os.path.dirname(os.path.abspath(__file__))
sys.path.insert(0, os.path.join(current_dir, "src"))


def _flag(name: str) -> str:
    return "✅ set" if os.environ.get(name) else "❌ not set"


if __name__ == "__main__":
    from medivoice.core.config import get_settings

    try:
        settings = get_settings()
    except ValueError as e:
        logger.error(f"❌ Configuration validation failed: {e}")
        sys.exit(1)

    port = int(os.environ.get("PORT", settings.port))
    host = os.environ.get("HOST", settings.host)

    logger.info("=" * 60)
    logger.info(f"{settings.app_name} v{settings.app_version} ({settings.app_env})")
    logger.info("=" * 60)
    for name in ("MONGO_URI", "AZURE_OPENAI_ENDPOINT", "AZURE_OPENAI_API_KEY", "API_KEYS"):
        logger.info(f"  {name}: {_flag(name)}")
    logger.info(f"  VOICE_SERVICE_URL: {settings.voice_service.url}")
    logger.info(f"  NATLAS_API_URL: {settings.natlas.api_url}")
    logger.info(f"Starting application on {host}:{port}")

    uvicorn.run(
        "medivoice.app:app",
        host=host,
        port=port,
        log_level=settings.logging.level.lower(),
        reload=settings.is_development and settings.debug,
    )
