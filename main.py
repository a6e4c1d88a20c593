#!/usr/bin/env python3
"""
Match Engine recompute worker.

Usage:
    python main.py
    python main.py --burst
    python main.py --verbose --worker-id worker-1
"""

import argparse
import logging
import signal
import sys

from core.app_context import AppContext
from core.config_loader import load_config
from database.database import configure_engine
from database.init_db import init_db
from recompute.worker import RecomputeWorker

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

# Global flag for graceful shutdown
running = True


def signal_handler(sig, frame):
    global running
    logger.info("Shutdown signal received")
    running = False


def is_running() -> bool:
    return running


def main():
    parser = argparse.ArgumentParser(description="Match Engine Recompute Worker")
    parser.add_argument('--burst', action='store_true', help='Drain the queue and exit')
    parser.add_argument('--worker-id', type=str, default=None, help='Identifier recorded on claimed items')
    parser.add_argument('--config', type=str, default=None, help='Path to config.yaml')
    parser.add_argument('--verbose', action='store_true')
    args = parser.parse_args()

    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    # Invalid weights fail here, before any work is claimed
    config = load_config(args.config)
    configure_engine(config.database.url, pool_pre_ping=True)

    # Initialize DB (with retry logic) and reconcile the weights fingerprint
    if init_db(config):
        logger.info("Signal weights changed since last start; all scores queued for recompute")

    context = AppContext.build(config)
    worker = RecomputeWorker(config, context.engine, worker_id=args.worker_id)

    try:
        done = worker.run_forever(should_run=is_running, burst=args.burst)
        logger.info(f"Worker exiting after {done} recomputes")
    except KeyboardInterrupt:
        logger.info("Worker stopped")
    except Exception as e:
        logger.error(f"Fatal worker error: {e}", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
