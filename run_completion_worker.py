"""
Job Auto-Completion Worker Runner
Run this as a separate process: python run_completion_worker.py
"""

import asyncio
import logging
import sys
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent))

from dispatch.workers.completion_worker import run_completion_worker

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)

logger = logging.getLogger(__name__)

if __name__ == "__main__":
    logger.info("🚀 Starting Job Auto-Completion Worker...")
    try:
        asyncio.run(run_completion_worker())
    except KeyboardInterrupt:
        logger.info("👋 Completion worker stopped by user")
    except Exception as e:
        logger.error(f"❌ Completion worker crashed: {e}")
        sys.exit(1)
