"""CLI entry point for dailybliss.

dailybliss schedules local notifications: give it a title, a body and a
time of day, and it reminds you once or every day. Bare `dailybliss` opens
the TUI; the subcommands below do the same things from a shell.
"""

import argparse
import sys
from datetime import datetime
from typing import NoReturn

from .center import AuthorizationError, ScheduleError, run_forever
from .config import ensure_config_exists, get_config_path, load_config
from .controller import NotificationController
from .store import format_time_of_day, parse_time_of_day


def _fail(message: str) -> NoReturn:
    print(f"Error: {message}", file=sys.stderr)
    sys.exit(1)


def _controller() -> NotificationController:
    try:
        return NotificationController()
    except ValueError as e:
        # Bad notifier backend name in config
        _fail(str(e))


def _resolve(controller: NotificationController, prefix: str) -> str:
    try:
        return controller.resolve(prefix).identifier
    except LookupError as e:
        _fail(str(e))


def cmd_tui(args: argparse.Namespace) -> None:
    """Launch the TUI."""
    from .tui import main as tui_main

    tui_main()


def cmd_add(args: argparse.Namespace) -> None:
    """Schedule a notification."""
    try:
        time_of_day = parse_time_of_day(args.at) if args.at else datetime.now().time()
    except ValueError as e:
        _fail(str(e))

    controller = _controller()
    try:
        item = controller.add_notification(
            args.title, args.body, time_of_day, is_repeat=not args.once
        )
    except ValueError as e:
        _fail(str(e))
    except ScheduleError as e:
        _fail(f"Failed to schedule notification: {e}")

    when = format_time_of_day(item.time, controller.config.tui.clock)
    kind = "every day" if item.is_repeat else "once"
    print(f"Scheduled [{item.short_id}] {item.title} at {when} ({kind})")
    if not controller.check_status():
        print("Notification permission is not enabled. Run 'dailybliss permission request'.")


def cmd_list(args: argparse.Namespace) -> None:
    """List saved notifications."""
    controller = _controller()
    items = controller.notifications
    if not items:
        print("No scheduled notifications.")
        return

    pending = {p.identifier for p in controller.center.pending_requests()}
    clock = controller.config.tui.clock
    for item in items:
        if not item.is_enabled:
            state = "off"
        elif item.identifier in pending:
            state = "scheduled"
        else:
            state = "delivered"
        repeat = "daily" if item.is_repeat else "once"
        when = format_time_of_day(item.time, clock)
        print(f"[{item.short_id}] {when} | {repeat} | {state} | {item.title}")
        if args.verbose:
            print(f"    {item.body}")


def cmd_pending(args: argparse.Namespace) -> None:
    """List pending requests in the notification center."""
    controller = _controller()
    pending = controller.center.pending_requests()
    if not pending:
        print("No pending notification requests.")
        return

    for p in pending:
        next_at = p.next_fire_datetime.strftime("%Y-%m-%d %H:%M:%S")
        trigger = p.request.trigger.describe()
        line = f"[{p.identifier[:8]}] {next_at} | {trigger} | {p.request.title}"
        if p.last_fired_at:
            last = datetime.fromtimestamp(p.last_fired_at).strftime("%Y-%m-%d %H:%M")
            line += f" (last {last})"
        print(line)


def cmd_delete(args: argparse.Namespace) -> None:
    """Delete a notification and cancel its pending request."""
    controller = _controller()
    identifier = _resolve(controller, args.id)
    controller.delete_notification(identifier)
    print(f"Deleted {identifier[:8]}")


def _set_enabled(args: argparse.Namespace, enabled: bool) -> None:
    controller = _controller()
    identifier = _resolve(controller, args.id)
    try:
        item = controller.set_enabled(identifier, enabled)
    except ScheduleError as e:
        _fail(f"Failed to schedule notification: {e}")
    print(f"{'Enabled' if item.is_enabled else 'Disabled'} [{item.short_id}] {item.title}")


def cmd_enable(args: argparse.Namespace) -> None:
    """Turn a notification back on."""
    _set_enabled(args, True)


def cmd_disable(args: argparse.Namespace) -> None:
    """Turn a notification off without deleting it."""
    _set_enabled(args, False)


def cmd_clear(args: argparse.Namespace) -> None:
    """Cancel all notifications."""
    count = _controller().cancel_all()
    print(f"Cancelled all notifications ({count})")


def cmd_permission_status(args: argparse.Namespace) -> None:
    controller = _controller()
    status = controller.center.authorization_status()
    state = "enabled" if controller.check_status() else "not enabled"
    backend = controller.center.backend.name
    print(f"Notification permission: {state} ({status.value}, backend {backend})")


def cmd_permission_request(args: argparse.Namespace) -> None:
    controller = _controller()
    try:
        granted = controller.request_permission()
    except AuthorizationError as e:
        _fail(f"Notification permission request failed: {e}")

    if granted:
        print("Notification permission granted!")
    else:
        print("Notification permission request failed!", file=sys.stderr)
        sys.exit(1)


def cmd_permission_reset(args: argparse.Namespace) -> None:
    _controller().center.reset_authorization()
    print("Notification permission reset; the next request will ask again.")


def cmd_run(args: argparse.Namespace) -> None:
    """Deliver due notifications (loop until Ctrl-C, or once with --once)."""
    controller = _controller()
    controller.resync()

    if args.once:
        delivered = controller.center.deliver_due()
        print(f"Delivered {len(delivered)} notification(s)")
        return

    interval = args.interval or controller.config.delivery.poll_interval
    print(f"Delivering notifications every {interval:g}s (Ctrl-C to stop)")
    run_forever(controller.center, poll_interval=interval)


def cmd_config_init(args: argparse.Namespace) -> None:
    """Initialize config file with defaults."""
    config_path = ensure_config_exists()
    print(f"Config file at: {config_path}")


def cmd_config_path(args: argparse.Namespace) -> None:
    """Print config file path."""
    print(get_config_path())


def cmd_config_show(args: argparse.Namespace) -> None:
    """Show current config."""
    config_path = get_config_path()
    if config_path.exists():
        print(config_path.read_text())
    else:
        print(f"No config file at {config_path}")
        print("Run 'dailybliss config init' to create one.")
        print(f"Defaults in effect: {load_config()}")


def setup_permission_parser(subparsers: argparse._SubParsersAction) -> None:
    """Set up the permission subcommand."""
    permission_parser = subparsers.add_parser(
        "permission",
        help="Check or request notification permission",
    )
    permission_subparsers = permission_parser.add_subparsers(dest="permission_command")

    status_parser = permission_subparsers.add_parser("status", help="Show permission status")
    status_parser.set_defaults(func=cmd_permission_status)

    request_parser = permission_subparsers.add_parser("request", help="Request permission")
    request_parser.set_defaults(func=cmd_permission_request)

    reset_parser = permission_subparsers.add_parser(
        "reset", help="Forget the stored decision so the next request asks again"
    )
    reset_parser.set_defaults(func=cmd_permission_reset)

    permission_parser.set_defaults(func=cmd_permission_status, permission_command=None)


def setup_config_parser(subparsers: argparse._SubParsersAction) -> None:
    """Set up the config subcommand."""
    config_parser = subparsers.add_parser(
        "config",
        help="Manage dailybliss configuration",
    )
    config_subparsers = config_parser.add_subparsers(dest="config_command")

    init_parser = config_subparsers.add_parser("init", help="Create default config file")
    init_parser.set_defaults(func=cmd_config_init)

    path_parser = config_subparsers.add_parser("path", help="Print config file path")
    path_parser.set_defaults(func=cmd_config_path)

    show_parser = config_subparsers.add_parser("show", help="Show current config")
    show_parser.set_defaults(func=cmd_config_show)

    config_parser.set_defaults(func=cmd_config_show, config_command=None)


def setup_notification_parsers(subparsers: argparse._SubParsersAction) -> None:
    """Set up the commands that manage saved notifications."""
    # add
    add_parser = subparsers.add_parser("add", help="Schedule a notification")
    add_parser.add_argument("title", help="Notification title")
    add_parser.add_argument("body", help="Notification body")
    add_parser.add_argument(
        "-t", "--at", help="Time of day, HH:MM or H:MMam/pm (default: now)"
    )
    add_parser.add_argument(
        "--once", action="store_true", help="Fire once instead of every day"
    )
    add_parser.set_defaults(func=cmd_add)

    # list
    list_parser = subparsers.add_parser("list", aliases=["ls"], help="List saved notifications")
    list_parser.add_argument("-v", "--verbose", action="store_true", help="Show bodies")
    list_parser.set_defaults(func=cmd_list)

    # pending
    pending_parser = subparsers.add_parser("pending", help="List pending notification requests")
    pending_parser.set_defaults(func=cmd_pending)

    # delete / enable / disable
    for name, func, help_text in (
        ("delete", cmd_delete, "Delete a notification"),
        ("enable", cmd_enable, "Turn a notification on"),
        ("disable", cmd_disable, "Turn a notification off"),
    ):
        parser = subparsers.add_parser(name, help=help_text)
        parser.add_argument("id", help="Notification identifier (a unique prefix is enough)")
        parser.set_defaults(func=func)

    # clear
    clear_parser = subparsers.add_parser("clear", help="Cancel all notifications")
    clear_parser.set_defaults(func=cmd_clear)

    # run
    run_parser = subparsers.add_parser("run", help="Deliver due notifications")
    run_parser.add_argument("--once", action="store_true", help="Deliver what's due and exit")
    run_parser.add_argument(
        "--interval", type=float, help="Seconds between checks (default: from config)"
    )
    run_parser.set_defaults(func=cmd_run)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="dailybliss",
        description="Schedule local notifications, once or every day",
    )
    subparsers = parser.add_subparsers(dest="command")

    setup_notification_parsers(subparsers)
    setup_permission_parser(subparsers)
    setup_config_parser(subparsers)

    tui_parser = subparsers.add_parser("tui", help="Open the TUI (default)")
    tui_parser.set_defaults(func=cmd_tui)

    return parser


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        cmd_tui(args)
    elif hasattr(args, "func"):
        args.func(args)
    else:
        parser.print_help()


if __name__ == "__main__":
    main()
