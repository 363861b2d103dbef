"""
Tidal OSC Library - CLI Application

Small command-line tools on top of TidalSession.

Usage:
    python -m tidal_osc_lib listen          # log trigger messages
    python -m tidal_osc_lib tempo           # log tempo updates
    python -m tidal_osc_lib rms --orbit 0   # VU meter for one orbit
    python -m tidal_osc_lib random          # send a random control
"""

import argparse
import asyncio
import logging
import math
import random
import signal
import sys
from dataclasses import replace
from typing import List, Optional

from .config import load_config
from .model import MeteringEvent
from .session import TidalSession
from .tidal_config import BridgeConfig

logger = logging.getLogger(__name__)

VU_BLOCKS = " ▁▂▃▄▅▆▇█"
VU_SCALE = 275


def render_vu_meter(event: MeteringEvent, scale: float = VU_SCALE) -> str:
    """
    Render one block character per audio channel of an orbit.

    Example:
        render_vu_meter(MeteringEvent(0, (ChannelLevel(-6.0, 0.01),)))
        -> "Orbit [0] ▂"
    """
    vu_max = len(VU_BLOCKS) - 1
    output = f"Orbit [{event.orbit}]"
    for level in event.channels:
        reading = max(0, min(vu_max, math.floor(scale * level.power)))
        output += f" {VU_BLOCKS[reading]}"
    return output


def build_config(args: argparse.Namespace) -> BridgeConfig:
    """Merge config file and command-line overrides."""
    config = load_config(args.config) if args.config else BridgeConfig()

    overrides = {}
    if args.in_port is not None:
        overrides["in_port"] = args.in_port
    if args.out_port is not None:
        overrides["out_port"] = args.out_port
    if args.midi:
        overrides["add_midi_data"] = True
    if args.command == "tempo":
        overrides["listen_tempo"] = True
    if args.command == "rms":
        overrides["listen_rms"] = True

    return replace(config, **overrides)


class BridgeApp:
    """
    Runs one CLI command against a session until stopped.
    """

    def __init__(self, config: BridgeConfig, command: str, orbit: int = 0,
                 interval: float = 0.1):
        self.session = TidalSession(config)
        self.command = command
        self.orbit = orbit
        self.interval = interval
        self._stop = asyncio.Event()

    def stop(self):
        self._stop.set()

    async def run(self) -> int:
        self.session.ready.add_callback(lambda _: logger.info("Tidal UDP port ready"))
        self.session.errors.add_callback(lambda err: logger.error(f"Error occurred: {err}"))

        if self.command == "listen":
            self.session.messages.add_callback(
                lambda message: logger.info(f"Received Tidal message: {message}")
            )
        elif self.command == "tempo":
            self.session.tempo.add_callback(
                lambda tempo: logger.info(f"Received Tidal tempo message: {tempo}")
            )
        elif self.command == "rms":
            self.session.rms.add_callback(self._on_rms)

        try:
            if not await self.session.open():
                return 1
            if self.command == "random":
                await self._send_random()
            else:
                await self._stop.wait()
        finally:
            await self.session.close()
        return 0

    def _on_rms(self, event: MeteringEvent):
        if event.orbit == self.orbit:
            sys.stdout.write(render_vu_meter(event) + "\r")
            sys.stdout.flush()

    async def _send_random(self):
        while not self._stop.is_set():
            self.session.send_float("random", random.random())
            try:
                await asyncio.wait_for(self._stop.wait(), timeout=self.interval)
            except asyncio.TimeoutError:
                pass


def create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tidal-osc",
        description="Tidal OSC bridge - listen to Tidal events and send controls",
    )
    parser.add_argument(
        "command", choices=["listen", "tempo", "rms", "random"],
        help="What to run"
    )
    parser.add_argument("--config", help="YAML config file")
    parser.add_argument("--in-port", type=int, help="Local port for Tidal messages")
    parser.add_argument("--out-port", type=int, help="Tidal control port")
    parser.add_argument("--orbit", type=int, default=0, help="Orbit shown by 'rms'")
    parser.add_argument(
        "--interval", type=float, default=0.1,
        help="Seconds between sends for 'random'"
    )
    parser.add_argument(
        "--midi", action="store_true",
        help="Add midinote to trigger messages"
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true",
        help="Enable verbose logging"
    )
    return parser


async def _run(app: BridgeApp) -> int:
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, app.stop)
        except NotImplementedError:
            # Windows event loops have no signal handlers; Ctrl+C raises instead
            pass
    return await app.run()


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    args = create_parser().parse_args(argv)

    # Configure logging
    level = logging.DEBUG if args.verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(message)s"
    )

    app = BridgeApp(
        build_config(args),
        args.command,
        orbit=args.orbit,
        interval=args.interval,
    )

    try:
        return asyncio.run(_run(app))
    except KeyboardInterrupt:
        logger.info("Interrupted")
        return 0


if __name__ == "__main__":
    sys.exit(main())
