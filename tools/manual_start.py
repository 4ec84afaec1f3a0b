#!/usr/bin/env python3
import os, sys
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
from yt_live_recorder.logging_config import configure_logging
from yt_live_recorder.recorder import is_already_recording, start_recording
from yt_live_recorder.settings import CONFIG_PATH, ConfigError, build_config, load_config
from yt_live_recorder.youtube_api import YouTubeAPI, YouTubeAPIError

# One-shot: check a channel once and, if it is live, record in the foreground.
if __name__ == '__main__':
    configure_logging()
    # allow channel override via argv
    channel = sys.argv[1] if len(sys.argv) > 1 else None
    try:
        file_values = load_config(CONFIG_PATH) if os.path.exists(CONFIG_PATH) else {}
        cfg = build_config(file_values, channel=channel)
    except ConfigError as e:
        print(f'Usage: manual_start.py [channel]  ({e})'); sys.exit(1)

    api = YouTubeAPI(cfg.api_key, timeout=cfg.request_timeout)
    try:
        live = api.get_live_video(cfg.channel)
    except YouTubeAPIError as e:
        print('API error:', e); sys.exit(1)
    if not live:
        print('No live for', cfg.channel); sys.exit(0)

    print('LIVE:', live.title, live.url)
    if is_already_recording(live.url, cfg.recorder_binary):
        print('Already recording', live.url); sys.exit(0)
    proc = start_recording(live.url, cfg.recorder_binary)
    if proc is None:
        sys.exit(1)
    print('EXITED:', proc.wait())
