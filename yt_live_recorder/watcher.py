import argparse
import logging
import os
import signal
import threading
import time
import uuid

from yt_live_recorder import __version__
from yt_live_recorder.logging_config import configure_logging
from yt_live_recorder.recorder import RecordingRegistry
from yt_live_recorder.settings import CONFIG_ENV_VAR, CONFIG_PATH, Config, ConfigError, build_config, load_config
from yt_live_recorder.youtube_api import ChannelNotFoundError, YouTubeAPI, YouTubeAPIError

logger = logging.getLogger(__name__)


def new_tick_id():
    return uuid.uuid4().hex[:8]


def run_tick(config: Config, api: YouTubeAPI, registry: RecordingRegistry, tick_id=None):
    """
    One pass of detect -> dedup -> record. Never raises: every failure is
    logged and the next tick starts from scratch.
    Returns the started process, or None.
    """
    tick_id = tick_id or new_tick_id()
    logger.info("[tick %s] Checking whether '%s' is live...", tick_id, config.channel)

    try:
        live = api.get_live_video(config.channel)
    except ChannelNotFoundError as e:
        logger.error("[tick %s] Configuration error: %s Check the channel name.", tick_id, e)
        return None
    except YouTubeAPIError as e:
        logger.error("[tick %s] YouTube API error: %s. Skipping this check cycle.", tick_id, e)
        return None
    except Exception:
        logger.exception("[tick %s] Unexpected error during API call. Skipping this check cycle.", tick_id)
        return None

    if live is None:
        logger.info("[tick %s] '%s' is not live.", tick_id, config.channel)
        return None

    logger.info("[tick %s] LIVE: '%s' by %s -> %s", tick_id, live.title, live.channel_title, live.url)
    try:
        proc = registry.ensure_recording(live)
    except Exception:
        logger.exception("[tick %s] Unexpected error while starting the recorder.", tick_id)
        return None

    if proc is None:
        logger.info("[tick %s] No new recorder started.", tick_id)
    return proc


def main_loop(config: Config, api=None, registry=None, stop_event=None):
    """The main loop to watch the channel and trigger recordings."""
    api = api or YouTubeAPI(config.api_key, timeout=config.request_timeout)
    registry = registry or RecordingRegistry(config.recorder_binary)
    stop_event = stop_event or threading.Event()

    logger.info("Watcher started. Monitoring '%s' every %ss.", config.channel, config.polling_interval)

    # Ticks run one after another on this thread; recordings run detached.
    while not stop_event.is_set():
        started = time.monotonic()
        run_tick(config, api, registry)

        recording = registry.active()
        if recording:
            logger.info("Currently recording: %s", recording)

        elapsed = time.monotonic() - started
        stop_event.wait(max(0.0, config.polling_interval - elapsed))

    logger.info("Exiting... running recorders are left to finish on their own.")


def _install_signal_handlers(stop_event):
    def _handler(signum, _frame):
        logger.info("Received signal %s, shutting down.", signum)
        stop_event.set()

    signal.signal(signal.SIGINT, _handler)
    if hasattr(signal, "SIGTERM"):
        signal.signal(signal.SIGTERM, _handler)


def build_parser():
    parser = argparse.ArgumentParser(
        prog="yt-live-recorder",
        description="Watch a YouTube channel and record its live broadcasts with yt-dlp.",
    )
    parser.add_argument("-a", "--api-key", help="YouTube Data API key")
    parser.add_argument("-c", "--channel", help="channel username or @handle")
    parser.add_argument("-q", "--quiet", action="store_true", default=None, help="only log warnings and errors")
    parser.add_argument("-d", "--debug", action="store_true", help="log debug output")
    parser.add_argument("-i", "--interval", type=float, dest="polling_interval", help="seconds between checks (default: 10)")
    parser.add_argument("--recorder", dest="recorder_binary", help="recorder executable (default: yt-dlp)")
    parser.add_argument(
        "--config",
        default=CONFIG_PATH,
        help=f"path to config.json (default: {CONFIG_PATH}, or set ${CONFIG_ENV_VAR})",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def parse_config(argv=None):
    """Parses the command line (falling back to config.json) into a Config."""
    parser = build_parser()
    args = parser.parse_args(argv)

    file_values = {}
    if os.path.exists(args.config):
        try:
            file_values = load_config(args.config)
        except ConfigError as e:
            parser.error(str(e))
    elif args.config != CONFIG_PATH:
        parser.error(f"Config file not found at {args.config}")

    try:
        config = build_config(
            file_values,
            api_key=args.api_key,
            channel=args.channel,
            polling_interval=args.polling_interval,
            recorder_binary=args.recorder_binary,
            quiet=args.quiet,
        )
    except ConfigError as e:
        parser.error(str(e))
    return config, args.debug


def main(argv=None):
    config, debug = parse_config(argv)
    configure_logging(quiet=config.quiet, debug=debug)

    stop_event = threading.Event()
    _install_signal_handlers(stop_event)
    main_loop(config, stop_event=stop_event)


if __name__ == "__main__":
    main()
