#!/usr/bin/env python3
"""
CLI entry point for netadvisor.

Defines the following commands:
  netadvisor serve [--host HOST] [--port 8000] [--interval SECONDS] [--mock] [--desktop-notify]
  netadvisor scan [--mock] [--ssid NAME]
  netadvisor version
"""

import asyncio
import sys
from argparse import ArgumentParser, Namespace
from dataclasses import replace
from importlib.metadata import PackageNotFoundError, version as _get_version

import uvicorn
from rich.console import Console
from rich.table import Table

from netadvisor.app import create_app
from netadvisor.config import AdvisorConfig, ConfigError
from netadvisor.health import NmcliPathWatcher, PathHealthMonitor, ReachabilityChecker
from netadvisor.log import get_logger, set_level
from netadvisor.models import ViewState
from netadvisor.notifications import DesktopNotificationSink, LogNotificationSink
from netadvisor.orchestrator import ScanOrchestrator
from netadvisor.score_engine import ScoreEngine
from netadvisor.wifi_scanner import MockScanSource, default_scan_source

logger = get_logger("netadvisor.cli")


def _build_config(args: Namespace) -> AdvisorConfig:
    config = AdvisorConfig.battery_saver() if getattr(args, "battery_saver", False) else AdvisorConfig.default()
    if getattr(args, "interval", None) is not None:
        config = replace(config, scan_interval_s=args.interval)
    if getattr(args, "rearm_after", None) is not None:
        config = replace(config, rearm_after_s=args.rearm_after)
    return config


def render_networks(state: ViewState) -> Table:
    """
    Build a Rich table of the ranked networks in a published view state.
    """
    table = Table(title=f"Available Networks ({len(state.ranked)} found)")
    table.add_column("#", justify="right")
    table.add_column("SSID")
    table.add_column("BSSID")
    table.add_column("Signal", justify="right")
    table.add_column("Details")
    table.add_column("Quality", justify="center")
    table.add_column("Score", justify="right")
    table.add_column("")

    for index, item in enumerate(state.ranked, start=1):
        obs = item.observation
        name = f"{obs.ssid} (Hidden)" if obs.is_hidden else obs.ssid
        marks = []
        if item.id == state.current_id:
            marks.append("current")
        if item.id == state.best_id:
            marks.append("recommended" if state.recommend_switch else "best alternative")
        table.add_row(
            str(index),
            name,
            obs.id,
            f"{obs.rssi} dBm",
            obs.details,
            "▮" * ScoreEngine.signal_bars(obs.rssi) + f" {ScoreEngine.signal_quality(obs.rssi)}/5",
            str(item.score),
            ", ".join(marks),
        )
    return table


def serve(args: Namespace) -> None:
    """
    Run the scan loop behind the HTTP/websocket view surface.
    """
    config = _build_config(args)
    monitor = PathHealthMonitor()
    source = MockScanSource() if args.mock else default_scan_source()
    sink = DesktopNotificationSink() if args.desktop_notify else LogNotificationSink()
    orchestrator = ScanOrchestrator(source, monitor, sink, config=config)
    watcher = NmcliPathWatcher(monitor, config, use_nmcli=False if args.mock else None)

    logger.info("Serve: host=%s, port=%s, interval=%.0fs", args.host, args.port, config.scan_interval_s)
    app = create_app(orchestrator, watcher)
    uvicorn.run(app, host=args.host, port=args.port)


async def _scan_once(args: Namespace) -> ViewState:
    config = _build_config(args)
    monitor = PathHealthMonitor(satisfied=True)
    checker = ReachabilityChecker(config.probe_url, config.probe_timeout_s)
    monitor.update_internet(await checker.check())

    source = MockScanSource(associated=args.ssid or "NEO-MESH") if args.mock else default_scan_source()
    orchestrator = ScanOrchestrator(source, monitor, LogNotificationSink(), config=config, initial_ssid=args.ssid)
    await orchestrator.scan_now()
    return orchestrator.state


def scan(args: Namespace) -> None:
    """
    Run one manual scan cycle and print the ranked networks.
    """
    state = asyncio.run(_scan_once(args))
    console = Console()
    if not state.ranked:
        console.print("No networks found")
        return
    console.print(render_networks(state))
    if state.recommend_switch:
        best = next(s for s in state.ranked if s.id == state.best_id)
        console.print(f"[bold]{best.ssid}[/bold] is significantly better (+{state.score_delta} points).")


def show_version(_: Namespace) -> None:
    try:
        print(_get_version("netadvisor"))
    except PackageNotFoundError:
        print("netadvisor (not installed)")


def build_parser() -> ArgumentParser:
    parser = ArgumentParser(prog="netadvisor", description="Wi-Fi network quality advisor")
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    p_serve = sub.add_parser("serve", help="run the scan loop and the HTTP/websocket API")
    p_serve.add_argument("--host", default="127.0.0.1")
    p_serve.add_argument("--port", type=int, default=8000)
    p_serve.add_argument("--interval", type=float, default=None, help="seconds between automatic scans")
    p_serve.add_argument("--rearm-after", type=float, default=None, help="re-announce a standing recommendation after N seconds")
    p_serve.add_argument("--battery-saver", action="store_true", help="slower scans and probes")
    p_serve.add_argument("--mock", action="store_true", help="use synthetic networks")
    p_serve.add_argument("--desktop-notify", action="store_true", help="send alerts with notify-send")
    p_serve.set_defaults(func=serve)

    p_scan = sub.add_parser("scan", help="scan once and print the ranked networks")
    p_scan.add_argument("--mock", action="store_true", help="use synthetic networks")
    p_scan.add_argument("--ssid", default=None, help="associated network to assume when none is reported")
    p_scan.set_defaults(func=scan)

    p_version = sub.add_parser("version", help="print the installed version")
    p_version.set_defaults(func=show_version)
    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.verbose:
        set_level("DEBUG")
    try:
        args.func(args)
    except ConfigError as exc:
        logger.error("Invalid configuration: %s", exc)
        return 2
    except KeyboardInterrupt:
        return 130
    return 0


if __name__ == "__main__":
    sys.exit(main())
