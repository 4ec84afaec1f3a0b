#!/usr/bin/env python3
# -*- coding: utf-8 -*-

import logging
import os
import subprocess
import sys
import threading
from typing import Dict, List, Optional

import psutil

from yt_live_recorder.youtube_api import LiveVideo

logger = logging.getLogger(__name__)

DEFAULT_RECORDER = "yt-dlp"


def recorder_executable(binary: str = DEFAULT_RECORDER) -> str:
    """Process-table name of the recorder on this platform (no directory part)."""
    name = os.path.basename(binary)
    if sys.platform.startswith("win") and not name.lower().endswith(".exe"):
        return f"{name}.exe"
    return name


def is_already_recording(video_url: str, binary: str = DEFAULT_RECORDER) -> bool:
    """
    Scans the OS process table for a recorder whose argument list contains
    video_url as an exact token. Best effort: the table can change right
    after this returns.
    """
    exe_name = recorder_executable(binary)
    for proc in psutil.process_iter(['name', 'cmdline']):
        try:
            if proc.info.get('name') != exe_name:
                continue
            cmdline = proc.info.get('cmdline') or []
            if video_url in cmdline[1:]:
                logger.debug("Found %s (PID %s) already recording %s", exe_name, proc.pid, video_url)
                return True
        except (psutil.NoSuchProcess, psutil.AccessDenied, psutil.ZombieProcess):
            continue
    return False


def start_recording(video_url: str, binary: str = DEFAULT_RECORDER) -> Optional[subprocess.Popen]:
    """
    Spawns the recorder with the watch URL as its only argument. stdout and
    stderr are inherited so the recorder's output lands in our log stream.
    Returns None if the binary could not be started.
    """
    cmd = [binary, video_url]
    try:
        proc = subprocess.Popen(cmd, stdout=None, stderr=None)
    except OSError as e:
        logger.error("Failed to start recorder %r for %s: %s", binary, video_url, e)
        return None
    logger.info("Recorder started for %s (PID: %s)", video_url, proc.pid)
    return proc


class RecordingRegistry:
    """
    Tracks the recorder processes this daemon launched, keyed by video id.
    Each process gets a reaper thread that waits for it and logs the exit
    status, so callers never block on a recording.
    """

    def __init__(self, binary: str = DEFAULT_RECORDER):
        self.binary = binary
        self._lock = threading.Lock()
        self._recordings: Dict[str, dict] = {}

    def _running_process(self, video_id: str) -> Optional[subprocess.Popen]:
        # caller holds self._lock
        info = self._recordings.get(video_id)
        if info is not None and info['process'].poll() is None:
            return info['process']
        return None

    def is_recording(self, video_id: str) -> bool:
        with self._lock:
            return self._running_process(video_id) is not None

    def active(self) -> List[str]:
        with self._lock:
            return [info['title'] for info in self._recordings.values() if info['process'].poll() is None]

    def ensure_recording(self, live: LiveVideo) -> Optional[subprocess.Popen]:
        """
        Starts a recorder for the live video unless one is already running,
        either launched by us or found in the process table.
        Returns the new process, or None when nothing was started.
        """
        with self._lock:
            running = self._running_process(live.video_id)
            if running is not None:
                logger.info("Already recording '%s' (PID: %s). Nothing to do.", live.title, running.pid)
                return None

            if is_already_recording(live.url, self.binary):
                logger.info("A %s process is already recording %s. Nothing to do.", self.binary, live.url)
                return None

            logger.info("Recording '%s' from %s ...", live.title, live.url)
            proc = start_recording(live.url, self.binary)
            if proc is None:
                return None
            self._recordings[live.video_id] = {
                'process': proc,
                'title': live.title,
                'url': live.url,
            }

        reaper = threading.Thread(
            target=self._reap,
            args=(live.video_id, proc),
            name=f"reaper-{live.video_id}",
            daemon=True,
        )
        reaper.start()
        return proc

    def _reap(self, video_id: str, proc: subprocess.Popen):
        returncode = proc.wait()
        with self._lock:
            info = self._recordings.get(video_id)
            if info is not None and info['process'] is proc:
                del self._recordings[video_id]
        # A non-zero exit is reported, not treated as a failure.
        logger.info("Recorder for %s (PID: %s) exited with status %s", video_id, proc.pid, returncode)
