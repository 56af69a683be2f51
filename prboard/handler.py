"""
AWS Lambda entrypoint for the PR approval refresh

Event-driven handler for callers such as EventBridge Scheduler.
No HTTP server; the refresh runs directly.
"""

import asyncio
import logging
from typing import Dict, Any, Optional

from prboard.config.database import init_db
from prboard.config.settings import settings
from prboard.orchestrator import RefreshConfig, RefreshOrchestrator

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def build_orchestrator() -> RefreshOrchestrator:
    init_db()
    return RefreshOrchestrator(RefreshConfig.from_settings(settings))


def lambda_handler(
    event: Optional[Dict[str, Any]],
    context: Any,
    orchestrator: Optional[RefreshOrchestrator] = None,
) -> Dict[str, Any]:
    """
    Run one refresh and report it in Lambda response form.

    Args:
        event: Event payload (unused beyond logging)
        context: Lambda context object
        orchestrator: Optional preconfigured orchestrator

    Returns:
        Dictionary with statusCode and the refresh result
    """
    logger.info(f"Lambda invoked with event keys: {sorted((event or {}).keys())}")

    try:
        runner = orchestrator or build_orchestrator()
        result = asyncio.run(runner.run_refresh())
    except Exception as e:
        logger.error(f"Lambda execution failed: {e}", exc_info=True)
        return {"statusCode": 500, "result": {"success": False, "error": str(e)}}

    return {
        "statusCode": 200 if result["success"] else 500,
        "result": result,
    }


# Allow local runs via `python -m prboard.handler`
if __name__ == "__main__":
    print(lambda_handler({}, None))
