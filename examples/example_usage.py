"""Example: drive the check-in desk against a running API (no UI).

    python -m examples.example_usage Jane Doe
    python -m examples.example_usage New Visitor new.visitor@example.org
"""

import asyncio
import importlib
import sys

from config import get_settings_module

from src.church_checkin.church_checkin.checkin.gateway import HttpCheckInGateway
from src.church_checkin.church_checkin.checkin.modes import Search
from src.church_checkin.church_checkin.checkin.workflow import CheckInWorkflow, WorkflowSettings
from src.church_checkin.church_checkin.core.logging import setup_logging


async def run(first_name: str, last_name: str, email: str = "") -> None:
    settings = importlib.import_module(get_settings_module())
    setup_logging(getattr(settings, "LOG_LEVEL", "INFO"))

    gateway = HttpCheckInGateway(settings.API_BASE_URL, timeout=settings.API_TIMEOUT_SECONDS)
    desk = CheckInWorkflow(gateway, settings=WorkflowSettings.from_settings(settings))
    desk.notifications.subscribe(lambda n: n and print(f"[{n.kind.value}] {n.message}"))

    try:
        async with desk:
            desk.set_names(first_name, last_name)
            while desk.resolver.pending:
                await asyncio.sleep(0.05)

            print("mode:", desk.mode.name.value)
            if isinstance(desk.mode, Search):
                return
            if email:
                desk.set_email(email)

            outcome = await desk.submit()
            if outcome is None:
                print("not checked in:", desk.field_errors or "see message above")
                return

            for row in desk.roster.rows():
                badge = " (first time)" if row.is_first_time_visitor else ""
                print(f"{row.check_in_time}  {row.name}{badge}")
    finally:
        gateway.close()


def main():
    if len(sys.argv) < 3:
        print(__doc__)
        sys.exit(2)
    asyncio.run(run(*sys.argv[1:4]))


if __name__ == "__main__":
    main()
