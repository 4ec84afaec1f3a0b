import getpass

from yt_live_recorder.settings import (
    CONFIG_PATH,
    DEFAULT_POLLING_INTERVAL,
    save_config,
)
from yt_live_recorder.youtube_api import ChannelNotFoundError, YouTubeAPI, YouTubeAPIError


def verify_channel(api, channel):
    """Resolves the channel and prints what was found. Returns the channel id or None."""
    print(f"\nLooking up '{channel}'...")
    try:
        channel_id = api.get_channel_id(channel)
    except ChannelNotFoundError:
        print(f"Error: '{channel}' did not match any channel. Try the @handle shown on the channel page.")
        return None
    except YouTubeAPIError as e:
        print(f"Error: the API request failed: {e}")
        return None

    print(f"Found channel id: {channel_id}")
    try:
        live = api.get_live_video(channel)
    except YouTubeAPIError as e:
        print(f"(Could not check live status: {e})")
        return channel_id
    if live:
        print(f"  [LIVE] '{live.title}' -> {live.url}")
    else:
        print("  [OFFLINE]")
    return channel_id


def ask_interval():
    while True:
        choice = input(f"\nSeconds between checks [{DEFAULT_POLLING_INTERVAL}]: ").strip()
        if not choice:
            return DEFAULT_POLLING_INTERVAL
        try:
            interval = int(choice)
        except ValueError:
            print("\nError: Invalid input. Please enter a whole number.")
            continue
        if interval <= 0:
            print("\nError: The interval must be greater than zero.")
            continue
        return interval


def main(config_path=CONFIG_PATH):
    """Main setup function to guide the user through configuration."""
    print("--- YouTube Live Recorder Setup ---")

    # 1. Get and Validate Credentials
    while True:
        api_key = getpass.getpass("\nYouTube Data API key: ").strip()
        channel = input("Channel username or @handle: ").strip()
        if not api_key or not channel:
            print("\nError: Both the API key and the channel are required.")
            continue

        if verify_channel(YouTubeAPI(api_key), channel):
            break
        retry = input("Do you want to try again? (y/n): ").lower()
        if retry != 'y':
            return False

    # 2. Polling Interval
    interval = ask_interval()

    # 3. Finalize and Save Config
    final_config = {
        "API_KEY": api_key,
        "CHANNEL": channel,
        "POLLING_INTERVAL_SECONDS": interval,
    }
    save_config(config_path, final_config)

    print("\n-------------------------------------")
    print(f"Setup complete! {config_path} has been created.")
    print("You can now run yt-live-recorder to start monitoring and recording.")
    print("-------------------------------------")
    return True


if __name__ == "__main__":
    main()
