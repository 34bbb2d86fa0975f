#!/usr/bin/env python3
"""
Smoke test the user_package routines against a live database.

Creates the package, runs the create/read/update/delete scenario, prints the
observed values as JSON and drops the package again. Connection settings come
from the environment or a .env file (DB_USER, DB_PASSWORD, CONNECT_STRING, WALLET_PATH,
WALLET_PASSWORD, MLE_MODULE).
"""

import argparse
import asyncio
import dataclasses
import json
import logging
import sys

from user_package_client import (
    BoundCallExecutor,
    DataAccessError,
    ScriptExecutor,
    UserPackageLifecycle,
    UserRepository,
    configure_logging,
    create_connection_provider,
    load_database_config,
    run_user_crud_scenario,
)

logger = logging.getLogger("run-user-scenario")


async def run(keep_package: bool) -> int:
    config = load_database_config()
    configure_logging(config.log_level)

    provider = create_connection_provider(config)
    lifecycle = UserPackageLifecycle.from_config(ScriptExecutor(provider), config)
    repository = UserRepository(BoundCallExecutor(provider))
    try:
        await lifecycle.setup()
        try:
            report = await run_user_crud_scenario(repository)
            users = await repository.list_all()
        finally:
            if not keep_package:
                await lifecycle.teardown()
    finally:
        await provider.close()

    output = dataclasses.asdict(report)
    output["passed"] = report.passed
    output["user_count"] = len(users)
    print(json.dumps(output, indent=2))
    return 0 if report.passed else 1


def main():
    parser = argparse.ArgumentParser(description="Run the user_package CRUD scenario")
    parser.add_argument("--keep-package", action="store_true",
                        help="Do not drop user_package after the run")
    args = parser.parse_args()

    try:
        return asyncio.run(run(args.keep_package))
    except DataAccessError as e:
        # includes ConfigurationError for invalid settings
        logger.error(f"Scenario failed: {e}")
        return 2


if __name__ == "__main__":
    sys.exit(main())
