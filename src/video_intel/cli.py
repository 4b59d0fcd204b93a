"""
Command-line interface for the Video Intelligence System.

Usage:
    video-intel annotate video.yaml                  # Annotate a video record file
    video-intel annotate video.yaml --output out.json
    video-intel annotate --video-id abc --description "..."
    video-intel annotate video.yaml --output-json    # JSON output for CI integration
    video-intel config                               # Show resolved configuration
"""

import argparse
import json
import logging
import sys
from pathlib import Path

import yaml
from pydantic import ValidationError

from video_intel.config import get_config, load_video_yaml


def _load_video(args):
    """
    Build the Video to annotate from a record file or command-line flags.

    Raises:
        SystemExit: If neither a file nor --video-id/--description is given
    """
    from video_intel.models.entities import Video

    if args.file:
        path = Path(args.file)
        if not path.exists():
            print(f"ERROR: File not found: {path}")
            sys.exit(1)
        try:
            data = load_video_yaml(path)
        except (ValueError, yaml.YAMLError) as exc:
            print(f"ERROR: Invalid video record: {exc}")
            sys.exit(1)
    elif args.video_id:
        data = {"video_id": args.video_id, "description_raw": args.description}
    else:
        print("ERROR: Provide a video record file or --video-id with --description")
        sys.exit(1)

    try:
        return Video.model_validate(data)
    except ValidationError as exc:
        print(f"ERROR: Invalid video record: {exc}")
        sys.exit(1)


def cmd_annotate(args):
    """Recognize entities in a video description."""
    from video_intel.analysis.entity_annotator import annotate_video

    video = _load_video(args)
    result = annotate_video(video)

    if args.output:
        output_path = Path(args.output)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(video.model_dump_json(indent=2), encoding="utf-8")

    # JSON output mode (for CI/automation)
    if args.output_json:
        print(result.to_json())
        sys.exit(1 if result.failure else 0)

    # Human-readable output
    if result.failure:
        print(f"ERROR: {result.failure.stage} failed: {result.failure.message}")
        sys.exit(1)

    if result.skipped:
        print(f"Video {video.video_id} has no description; nothing to annotate.")
        return

    print(f"Annotated video {video.video_id}: {result.entities_added} entity(ies) added")
    added = video.categorized_entities[len(video.categorized_entities) - result.entities_added:]
    for entity in added:
        sub = f"/{entity.sub_category}" if entity.sub_category else ""
        print(f"  - {entity.text} [{entity.category}{sub}] {entity.confidence_score:.2f}")

    if video.processed_text:
        print("\nHigh-confidence entities:")
        for line in video.processed_text.splitlines():
            print(f"  {line}")

    if args.output:
        print(f"\nWrote annotated video to {args.output}")


def cmd_config(args):
    """Show the resolved language service configuration."""
    try:
        config = get_config()
    except ValidationError as exc:
        print("ERROR: Invalid configuration:")
        for error in exc.errors():
            loc = ".".join(str(part) for part in error["loc"])
            print(f"  - {loc}: {error['msg']}")
        print("Set LANGUAGE_AI_ENDPOINT, LANGUAGE_AI_API_KEY, LANGUAGE_AI_PROJECT_NAME "
              "and LANGUAGE_AI_DEPLOYMENT_NAME or add them to video_intel.yaml")
        sys.exit(1)

    settings = config.masked()
    if args.output_json:
        print(json.dumps(settings, indent=2))
        return

    for key, value in settings.items():
        print(f"{key}: {value}")


def main(argv=None):
    parser = argparse.ArgumentParser(
        prog="video-intel",
        description="Video Intelligence System -- annotate videos with recognized entities",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        default=False,
        help="Enable debug logging",
    )
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # annotate
    sub_annotate = subparsers.add_parser(
        "annotate",
        help="Recognize entities in a video description",
    )
    sub_annotate.add_argument(
        "file",
        nargs="?",
        default=None,
        help="Video record file (YAML or JSON)",
    )
    sub_annotate.add_argument("--video-id", default=None, help="Video identifier")
    sub_annotate.add_argument("--description", default=None, help="Raw description text")
    sub_annotate.add_argument(
        "--output",
        default=None,
        help="Write the annotated video record to this path (JSON)",
    )
    sub_annotate.add_argument(
        "--output-json",
        action="store_true",
        default=False,
        help="Output result as JSON (for CI/automation)",
    )
    sub_annotate.set_defaults(func=cmd_annotate)

    # config
    sub_config = subparsers.add_parser(
        "config",
        help="Show resolved language service configuration",
    )
    sub_config.add_argument(
        "--output-json",
        action="store_true",
        default=False,
        help="Output configuration as JSON",
    )
    sub_config.set_defaults(func=cmd_config)

    args = parser.parse_args(argv)
    if args.command is None:
        parser.print_help()
        sys.exit(0)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    args.func(args)


if __name__ == "__main__":
    main()
