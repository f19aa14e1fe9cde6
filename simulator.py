"""Interactive CLI simulator — exercise the OTP flow without sending email."""

import asyncio

from email_otp.config import settings
from email_otp.main import build_otp_service
from email_otp.services.email_service import ConsoleNotifier

BLUE = "\033[94m"
GREEN = "\033[92m"
YELLOW = "\033[93m"
RED = "\033[91m"
DIM = "\033[2m"
BOLD = "\033[1m"
RESET = "\033[0m"

CLIENT_KEY = "simulator"


async def main() -> None:
    print(f"\n{BOLD}{'=' * 52}")
    print(f"  🔐  {settings.app_name} — OTP Simulator")
    print(f"{'=' * 52}{RESET}\n")

    print(f"{DIM}Commands: send | resend | verify <code> | switch | quit{RESET}")
    print(f"{DIM}Codes are printed below instead of being emailed{RESET}\n")

    notifier = ConsoleNotifier()
    service = build_otp_service(settings, notifier=notifier)

    email = input(f"{YELLOW}Enter email to simulate: {RESET}").strip() or "a@b.com"
    print(f"{DIM}Simulating as {email}{RESET}\n")

    while True:
        try:
            user_input = input(f"{BLUE}{BOLD}>{RESET} ").strip()
        except (KeyboardInterrupt, EOFError):
            print(f"\n{DIM}Goodbye!{RESET}")
            break

        if not user_input:
            continue

        command, _, arg = user_input.partition(" ")
        command = command.lower()

        if command in ("quit", "exit"):
            print(f"{DIM}Goodbye!{RESET}")
            break

        if command == "switch":
            email = input(f"{YELLOW}New email: {RESET}").strip() or email
            print(f"{DIM}Now simulating as {email}{RESET}\n")
            continue

        if command == "send":
            result = await service.issue(email, CLIENT_KEY)
        elif command == "resend":
            result = await service.reissue(email, CLIENT_KEY)
        elif command == "verify":
            result = await service.verify(email, arg, CLIENT_KEY)
        else:
            print(f"{DIM}Unknown command '{command}'{RESET}\n")
            continue

        colour = GREEN if result.success else RED
        print(f"{colour}[{result.outcome.code}]{RESET} {result.message}")
        if result.success and command in ("send", "resend") and notifier.outbox:
            _, _, text_body = notifier.outbox[-1]
            print(f"{DIM}📧 {text_body.splitlines()[0]}{RESET}")
        print()


if __name__ == "__main__":
    asyncio.run(main())
