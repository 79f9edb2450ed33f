"""Log in and print signed stream URLs for one or more tracks.

Usage:
    # Credentials from PLAYMUSIC_* environment variables / .env
    python scripts/fetch_stream_url.py Tabc123 Tdef456

    # Master token on the command line, download instead of printing
    python scripts/fetch_stream_url.py --master-token aas_et/... --download ./music Tabc123

Exit status is 2 when the account has no phone registered (log in from the
mobile app once, then retry) and 1 for any other failure.
"""

import argparse
import asyncio
import sys
from pathlib import Path

from playmusic import BindError, Credential, PlayMusicClient, PlayMusicError, get_settings
from playmusic.logging import configure_logging, get_logger

logger = get_logger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__, formatter_class=argparse.RawDescriptionHelpFormatter)
    parser.add_argument("track_ids", nargs="+", help="All-access (T...) or library track ids")
    parser.add_argument("--email", help="Account email (password login)")
    parser.add_argument("--password", help="Account password (password login)")
    parser.add_argument("--master-token", help="Previously issued master token")
    parser.add_argument("--android-id", help="Stable device identifier to reuse")
    parser.add_argument("--download", type=Path, metavar="DIR", help="Download and tag tracks into DIR")
    parser.add_argument("--log-level", default=None, help="Override PLAYMUSIC_LOG_LEVEL")
    return parser.parse_args(argv)


def build_credential(args: argparse.Namespace) -> Credential | None:
    if args.master_token or args.password:
        return Credential(email=args.email, password=args.password, master_token=args.master_token)
    return None


async def run(args: argparse.Namespace) -> int:
    settings = get_settings()
    client = PlayMusicClient(settings=settings)

    async with client.lifecycle():
        session = await client.login(build_credential(args), android_id=args.android_id)
        logger.info("logged_in", android_id=client.android_id, all_access=session.all_access)

        for track_id in args.track_ids:
            if args.download:
                args.download.mkdir(parents=True, exist_ok=True)
                target = args.download / f"{track_id}.mp3"
                track = await client.download(track_id, target)
                print(f"{track_id}\t{target}\t{track.get('title', '')}")
            else:
                print(f"{track_id}\t{await client.get_stream_url(track_id)}")
    return 0


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    configure_logging(args.log_level)
    try:
        return asyncio.run(run(args))
    except BindError as exc:
        logger.error("no_usable_device", error=str(exc))
        return 2
    except PlayMusicError as exc:
        logger.error("fetch_failed", error=str(exc), error_type=type(exc).__name__)
        return 1


if __name__ == "__main__":
    sys.exit(main())
