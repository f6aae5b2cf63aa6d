"""Command-line entry point with subcommand routing."""

import argparse
import logging
import os
import sys

from podcast_assembler.assets import asset_candidate_path, asset_names
from podcast_assembler.config import load_config
from podcast_assembler.constants import LAUGHTER_MODES, OUTPUT_FORMATS, PROGRAM_TYPES, VERSION
from podcast_assembler.errors import ConfigError, WavDecodeError
from podcast_assembler.parser import load_script
from podcast_assembler.pipeline import render_program
from podcast_assembler.wav import read_wav_file


def cmd_render(args):
    """Render a script file to an audio master."""
    if not os.path.exists(args.script):
        print(f"Error: File not found: {args.script}", file=sys.stderr)
        raise SystemExit(1)

    try:
        lines = load_script(args.script)
    except (OSError, ValueError) as e:
        print(f"Error: Could not read script {args.script}: {e}", file=sys.stderr)
        raise SystemExit(1)
    if not lines:
        print(f"Error: No script lines found in {args.script}", file=sys.stderr)
        raise SystemExit(1)

    name = args.name or os.path.splitext(os.path.basename(args.script))[0]
    overrides = {
        "output_dir": args.output_dir,
        "output_name": name,
        "output_format": args.format,
        "program_type": args.program_type,
        "laughter_mode": args.laughter_mode,
    }
    if args.no_bgm:
        overrides.update(insert_opening_bgm=False, insert_ending_bgm=False,
                         insert_jingles=False, insert_continuous_bgm=False)
    try:
        config = load_config(args.config, **overrides)
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        raise SystemExit(1)

    print(f"Rendering {len(lines)} lines from {args.script}")
    result = render_program(lines, config, verbose=args.verbose)
    if not result.success:
        print(f"Error: {result.message}", file=sys.stderr)
        raise SystemExit(1)

    if result.omissions:
        print(f"Completed with {len(result.omissions)} omission(s):")
        for note in result.omissions:
            print(f"  - {note}")
    print(f"Done: {result.path} ({result.duration_seconds:.1f}s, {result.segments} segments)")


def cmd_inspect(args):
    """Print the WAV descriptor of a file."""
    try:
        desc, payload = read_wav_file(args.file)
    except WavDecodeError as e:
        print(f"Error: {e}", file=sys.stderr)
        raise SystemExit(1)
    frames = len(payload) // max(1, desc.num_channels * desc.bits_per_sample // 8)
    print(f"File:        {args.file}")
    print(f"Format:      {desc.audio_format}")
    print(f"Sample rate: {desc.sample_rate} Hz")
    print(f"Channels:    {desc.num_channels}")
    print(f"Bits:        {desc.bits_per_sample}")
    print(f"Data:        {desc.data_length} bytes at offset {desc.data_offset}")
    print(f"Duration:    {frames / desc.sample_rate:.2f}s")


def cmd_assets(args):
    """List asset paths for a program type and whether they exist."""
    try:
        config = load_config(args.config, program_type=args.program_type)
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        raise SystemExit(1)
    print(f"Assets ({config.program_type}):")
    for key, candidate in asset_names(config.program_type, config.assets).items():
        path = asset_candidate_path(candidate, config.project_root, config.asset_dir)
        marker = "[ok]" if os.path.isfile(path) else "[--]"
        print(f"  {marker} {key:<11} {path}")


def main(argv=None):
    """CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="podcast-assembler",
        description="Podcast Assembler: render spoken-word scripts into a mixed audio program",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {VERSION}")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # render
    render_parser = subparsers.add_parser("render", help="Render a script to an audio master")
    render_parser.add_argument("script", help="Script file (.txt with 'Speaker: text' lines, or .json)")
    render_parser.add_argument("--config", help="JSON render config")
    render_parser.add_argument("--output-dir", help="Output directory")
    render_parser.add_argument("--name", help="Output base name (default: script file name)")
    render_parser.add_argument("--format", choices=OUTPUT_FORMATS, help="Output format")
    render_parser.add_argument("--program-type", choices=PROGRAM_TYPES, help="Asset set to use")
    render_parser.add_argument("--laughter-mode", choices=LAUGHTER_MODES, help="Laughter marker handling")
    render_parser.add_argument("--no-bgm", action="store_true", help="Disable all BGM, jingles and background mixing")
    render_parser.add_argument("-v", "--verbose", action="store_true", help="Verbose progress and debug logging")
    render_parser.set_defaults(func=cmd_render)

    # inspect
    inspect_parser = subparsers.add_parser("inspect", help="Show a WAV file's format")
    inspect_parser.add_argument("file", help="Path to a WAV file")
    inspect_parser.set_defaults(func=cmd_inspect)

    # assets
    assets_parser = subparsers.add_parser("assets", help="List resolved audio assets")
    assets_parser.add_argument("--config", help="JSON render config")
    assets_parser.add_argument("--program-type", choices=PROGRAM_TYPES, help="Asset set to list")
    assets_parser.set_defaults(func=cmd_assets)

    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return

    logging.basicConfig(
        level=logging.DEBUG if getattr(args, "verbose", False) else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    args.func(args)
