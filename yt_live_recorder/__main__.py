from yt_live_recorder.watcher import main

if __name__ == "__main__":
    main()
