"""
Command-line host: a pygame window driving the engine.

Keys:
    1-7     select mode (flower, orbital, spectrum, nebula, waveform,
            kaleidoscope, constellation)
    c       cycle color scheme
    r       reinitialize particles
    space   pause / resume
    esc     quit
"""

import argparse
import logging
import sys
from pathlib import Path

import pygame

from soundcanvas.config import PROFILES, EngineConfig
from soundcanvas.core.palettes import COLOR_SCHEMES
from soundcanvas.driver import FrameDriver, ManualScheduler
from soundcanvas.io.analyser import Analyser, AnalyserSource, PlaybackClock
from soundcanvas.render.pygame_surface import PygameSurface
from soundcanvas.visualizers import Mode

MODE_KEYS = {pygame.K_1 + i: mode for i, mode in enumerate(Mode)}


class ClockScheduler(ManualScheduler):
    """Runs queued frames no faster than ``fps`` using a pygame clock."""

    def __init__(self, fps: int):
        super().__init__()
        self.fps = fps
        self.clock = pygame.time.Clock()

    def run_frame(self) -> int:
        self.clock.tick(self.fps)
        return super().run_frame()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="soundcanvas",
        description="Audio-reactive generative canvas",
    )

    parser.add_argument(
        "audio",
        type=Path,
        nargs="?",
        default=None,
        help="Input audio file (wav, mp3, flac); omit with --mic",
    )

    parser.add_argument(
        "--mic",
        action="store_true",
        help="Use live microphone input instead of a file",
    )

    parser.add_argument(
        "-p", "--profile",
        choices=sorted(PROFILES),
        default="low",
        help="Resolution/fps profile (default: low)",
    )

    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="JSON config file (overrides --profile)",
    )

    parser.add_argument(
        "-m", "--mode",
        choices=[m.value for m in Mode],
        default=None,
        help="Initial mode (default: flower)",
    )

    parser.add_argument(
        "-c", "--color-scheme",
        choices=sorted(COLOR_SCHEMES),
        default=None,
        help="Initial color scheme (default: aurora)",
    )

    parser.add_argument(
        "--width",
        type=int,
        default=None,
        help="Window width (overrides profile)",
    )

    parser.add_argument(
        "--height",
        type=int,
        default=None,
        help="Window height (overrides profile)",
    )

    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Random seed for reproducible particle layouts",
    )

    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging",
    )

    return parser


def load_config(args) -> EngineConfig:
    overrides = {
        "mode": args.mode,
        "color_scheme": args.color_scheme,
        "width": args.width,
        "height": args.height,
        "seed": args.seed,
    }
    if args.config is not None:
        base = EngineConfig.from_json(args.config).to_dict()
        base.update({k: v for k, v in overrides.items() if v is not None})
        return EngineConfig.from_dict(base)
    return EngineConfig.from_profile(args.profile, **overrides)


def handle_event(driver: FrameDriver, event, screen: PygameSurface) -> bool:
    """Apply one pygame event; returns False when the session should end."""
    if event.type == pygame.QUIT:
        return False

    if event.type == pygame.VIDEORESIZE:
        width, height = max(1, event.w), max(1, event.h)
        window = pygame.display.set_mode((width, height), pygame.RESIZABLE)
        screen.resize(width, height, target=window)
        driver.on_resize(width, height)

    elif event.type == pygame.KEYDOWN:
        if event.key == pygame.K_ESCAPE:
            return False
        if event.key in MODE_KEYS:
            driver.set_mode(MODE_KEYS[event.key])
        elif event.key == pygame.K_c:
            names = driver.colors.names()
            driver.set_color_scheme(names[(names.index(driver.colors.current) + 1) % len(names)])
        elif event.key == pygame.K_r:
            driver.reinitialize_particles()
        elif event.key == pygame.K_SPACE:
            if driver.running:
                driver.pause()
            else:
                driver.resume()
    return True


def main():
    """CLI entry point."""
    args = build_parser().parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if not args.mic and args.audio is None:
        print("Error: Provide an audio file or --mic", file=sys.stderr)
        sys.exit(1)
    if args.audio is not None and not args.audio.exists():
        print(f"Error: Audio file not found: {args.audio}", file=sys.stderr)
        sys.exit(1)

    try:
        config = load_config(args)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    analyser = Analyser.from_config(config)
    clock = None
    if args.mic:
        from soundcanvas.io.microphone import MicrophoneSource

        source = MicrophoneSource(analyser)
        source.start()
        print("Listening on default input device")
    else:
        print(f"Loading: {args.audio}")
        clock = PlaybackClock()
        source = AnalyserSource.from_file(args.audio, analyser=analyser, clock=clock)
        print(f"Duration: {source.duration:.2f}s")

    pygame.init()
    pygame.display.set_caption("SoundCanvas")
    window = pygame.display.set_mode((config.width, config.height), pygame.RESIZABLE)
    screen = PygameSurface.wrap(window)

    scheduler = ClockScheduler(config.fps)
    driver = FrameDriver(config, source, screen, scheduler)

    if clock is not None:
        pygame.mixer.init()
        pygame.mixer.music.load(str(args.audio))
        pygame.mixer.music.play()
        clock.start()

    print(f"Mode: {driver.mode.value}  Scheme: {driver.colors.current}  FPS: {config.fps}")
    print("Keys: 1-7 mode, c scheme, r reset, space pause, esc quit")

    driver.resume()
    running = True
    try:
        while running:
            was_running = driver.running
            for event in pygame.event.get():
                if not handle_event(driver, event, screen):
                    running = False
                    break

            if clock is not None and was_running != driver.running:
                if driver.running:
                    clock.resume()
                    pygame.mixer.music.unpause()
                else:
                    clock.pause()
                    pygame.mixer.music.pause()

            if driver.running:
                scheduler.run_frame()
            else:
                scheduler.clock.tick(config.fps)
            pygame.display.flip()

            if clock is not None and source.finished:
                running = False
    finally:
        driver.pause()
        if args.mic:
            source.stop()
        pygame.quit()

    print(f"Rendered {driver.frames} frames")
    if screen.skipped:
        print(f"Skipped draw calls: {screen.skipped}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
