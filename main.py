import argparse

from arena.core.console import LogLevel
from arena.game.game_engine import GameEngine


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run a red-vs-blue arena match from a YAML match file.")
    parser.add_argument("--config", default="config/skirmish.yml", help="match file, merged over the packaged defaults")
    parser.add_argument("--red", default=None, help="player module for red (default: teams.red.player)")
    parser.add_argument("--blue", default=None, help="player module for blue (default: teams.blue.player)")
    parser.add_argument("--rounds", type=int, default=None, help="override game.max_rounds")
    parser.add_argument("--log-name", default="match", help="prefix of the match log file")
    parser.add_argument("--log-dir", default="logs", help="directory the match log is written to")
    parser.add_argument("--log-level", choices=[level.name for level in LogLevel], default=None, help="console verbosity (default: game.log_level)")
    parser.add_argument("--no-record", action="store_true", help="do not write a match log")
    return parser.parse_args(argv)


def main(argv=None) -> None:
    args = parse_args(argv)
    engine = GameEngine.launch_from_files(
        config_main=args.config,
        red_strategy=args.red,
        blue_strategy=args.blue,
        log_name=args.log_name,
        log_path=args.log_dir,
        set_level=LogLevel[args.log_level] if args.log_level else None,
        max_rounds=args.rounds,
        record=not args.no_record,
    )
    print(engine.result())


if __name__ == "__main__":
    main()
