#!/usr/bin/env python3
"""
VeoStudio - Main Entry Point

Generates videos with Veo from a text prompt and an optional reference image.

Usage:
    # Generate two videos from a prompt
    python main.py generate --prompt "a cat" --count 2

    # Animate a reference image
    python main.py generate --prompt "the cat starts dancing" --image cat.png

    # Check configuration
    python main.py config
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import Optional

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
    datefmt="%H:%M:%S",
)
logger = logging.getLogger("veostudio")

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_QUOTA = 2


async def generate_video(
    prompt: str,
    image_path: Optional[str] = None,
    count: int = 1,
    output_dir: Optional[str] = None,
) -> int:
    """
    Run one generation and render it to the console.

    Args:
        prompt: Text description of the video
        image_path: Optional PNG used as the first frame
        count: Number of videos to generate
        output_dir: Directory for downloaded videos

    Returns:
        Process exit code
    """
    from cli.console_view import ConsoleView, encode_image_file
    from core.config import get_config
    from services.video_generation import VideoGenerationClient

    config = get_config()
    for issue in config.validate():
        logger.warning(f"Config issue: {issue}")

    encoded_image = ""
    if image_path:
        try:
            encoded_image = encode_image_file(Path(image_path))
        except OSError as e:
            logger.error(f"Cannot read reference image {image_path}: {e}")
            return EXIT_FAILED
        logger.info(f"Reference image: {image_path}")

    view = ConsoleView()
    client = VideoGenerationClient(
        config=config,
        output_dir=Path(output_dir or config.output.output_dir),
        on_progress=view.on_progress,
    )

    try:
        outcome = await client.generate(view, prompt, encoded_image, count)
    finally:
        await client.close()

    if outcome.quota_exceeded:
        return EXIT_QUOTA
    return EXIT_OK if outcome.succeeded else EXIT_FAILED


def check_config() -> int:
    """Print configuration issues; non-zero exit when any are found."""
    from core.config import get_config

    config = get_config()
    issues = config.validate()

    print(f"Model:          {config.models.video_model}")
    print(f"Poll interval:  {config.polling.interval_seconds:g}s")
    print(f"Max attempts:   {config.polling.max_attempts or 'unbounded'}")
    print(f"Max duration:   {config.polling.max_duration_seconds or 'unbounded'}")
    print(f"Output dir:     {config.output.output_dir}")

    for issue in issues:
        print(f"⚠️  {issue}")
    return EXIT_FAILED if issues else EXIT_OK


def main():
    parser = argparse.ArgumentParser(
        description="VeoStudio - Veo Video Generation",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    # Generate a video
    python main.py generate --prompt "a cat"

    # Generate several videos from a reference frame
    python main.py generate --prompt "waves at dusk" --image frame.png --count 2
        """,
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    # Generate command
    gen_parser = subparsers.add_parser("generate", help="Generate videos")
    gen_parser.add_argument("--prompt", "-p", required=True, help="Text prompt")
    gen_parser.add_argument("--image", "-i", help="Reference image (PNG)")
    gen_parser.add_argument("--count", "-n", type=int, default=1, help="Number of videos")
    gen_parser.add_argument("--output", "-o", help="Output directory")

    # Config command
    subparsers.add_parser("config", help="Show and validate configuration")

    args = parser.parse_args()

    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    if not args.command:
        parser.print_help()
        sys.exit(EXIT_FAILED)

    if args.command == "generate":
        sys.exit(
            asyncio.run(
                generate_video(
                    prompt=args.prompt,
                    image_path=args.image,
                    count=args.count,
                    output_dir=args.output,
                )
            )
        )

    elif args.command == "config":
        sys.exit(check_config())


if __name__ == "__main__":
    main()
