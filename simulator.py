"""Interactive CLI simulator — exercise the OTP flow without an HTTP client."""

import asyncio
import logging

from otp_verifier.config import settings
from otp_verifier.services.delivery import LoggingDelivery
from otp_verifier.verification.results import VerifyStatus
from otp_verifier.verification.service import VerificationService

BLUE = "\033[94m"
GREEN = "\033[92m"
YELLOW = "\033[93m"
RED = "\033[91m"
DIM = "\033[2m"
BOLD = "\033[1m"
RESET = "\033[0m"

HELP = (
    f"{DIM}Commands: send | resend | <code> to verify | "
    f"switch | quit{RESET}"
)


async def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(levelname)-8s | %(message)s")

    print(f"\n{BOLD}{'=' * 52}")
    print(f"  🔐  {settings.app_name} — OTP Simulator")
    print(f"{'=' * 52}{RESET}\n")
    print(HELP)
    print(f"{DIM}     OTP codes are printed in the log output{RESET}\n")

    email = input(f"{YELLOW}Enter email to simulate: {RESET}").strip() or "user@example.com"
    print(f"{DIM}Simulating as {email}{RESET}\n")

    async with VerificationService.from_settings(settings, LoggingDelivery()) as service:
        while True:
            try:
                user_input = input(f"{BLUE}{BOLD}You:{RESET} ").strip()
            except (KeyboardInterrupt, EOFError):
                print(f"\n{DIM}Goodbye!{RESET}")
                break

            if not user_input:
                continue

            command = user_input.lower()
            if command == "quit":
                print(f"{DIM}Goodbye!{RESET}")
                break

            if command == "switch":
                email = input(f"{YELLOW}New email: {RESET}").strip() or email
                print(f"{DIM}Switched to {email}{RESET}\n")
                continue

            if command == "send":
                result = await service.issue(email)
                colour = GREEN if result.ok else RED
                print(f"{colour}{BOLD}Server:{RESET} {result.message}\n")
                continue

            if command == "resend":
                result = await service.resend(email)
                print(f"{GREEN}{BOLD}Server:{RESET} {result.message}\n")
                continue

            verdict = await service.verify(email, user_input)
            colour = GREEN if verdict.status is VerifyStatus.VERIFIED else RED
            print(f"{colour}{BOLD}Server:{RESET} {verdict.message}")
            if verdict.needs_new_code:
                print(f"{DIM}Type 'send' to request a new code.{RESET}")
            print()


if __name__ == "__main__":
    asyncio.run(main())
