"""
python -m wechat_minapp token [--stable] [--force-refresh]
python -m wechat_minapp <login|decrypt|check-session|phone|qrcode|msg-sec-check> ...
"""

import sys

CLIENT_COMMANDS = (
    "login",
    "decrypt",
    "check-session",
    "phone",
    "qrcode",
    "msg-sec-check",
)

USAGE = "Usage: wechat-minapp <token|{}> [options]".format("|".join(CLIENT_COMMANDS))


def main() -> None:
    # credentials may precede the command: wechat-minapp --app-id X login ...
    args = sys.argv[1:]
    command = next((a for a in args if a == "token" or a in CLIENT_COMMANDS), None)
    if command is None:
        print(USAGE, file=sys.stderr)
        sys.exit(1)

    if command == "token":
        args.remove("token")
        sys.argv = [sys.argv[0], *args]
        from .auth import main as auth_main

        auth_main()
    else:
        from .client import main as client_main

        client_main()


if __name__ == "__main__":
    main()
