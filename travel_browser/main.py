"""
Main entry point and CLI for the Travel Marketplace Browser.

Lists bookings, events, guides or holiday packages from the backend with
optional filters and sort order, and prints the rendered listing.
"""

import asyncio
import argparse
import logging
import sys
from typing import Dict, Optional
from datetime import datetime

# Load environment variables from .env file
from dotenv import load_dotenv
load_dotenv()

from travel_browser.backend import TravelApiClient
from travel_browser.config import BROWSER_CONFIG, get_browser_settings
from travel_browser.controller import RESOURCE_FACTORIES, ListingController, build_resource
from travel_browser.models import ErrorKind
from travel_browser.navigation import RecordingNavigator
from travel_browser.notifications import InMemoryNotificationChannel
from travel_browser.presentation import format_listing_view, render_listing


# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def collect_filters(
    location: Optional[str] = None,
    date: Optional[str] = None,
    expertise: Optional[str] = None,
    status: Optional[str] = None
) -> Dict[str, str]:
    """
    Collect the filters given on the command line.

    Guide status "all" maps to the empty status the backend expects.

    Returns:
        Dictionary of filter name to value, without unset filters
    """
    filters = {}
    if location is not None:
        filters["location"] = location
    if date is not None:
        filters["date"] = date
    if expertise is not None:
        filters["expertise"] = expertise
    if status is not None:
        filters["status"] = "" if status == "all" else status
    return filters


async def run_listing(
    resource_name: str,
    filters: Optional[Dict[str, str]] = None,
    sort_by: Optional[str] = None,
    order: Optional[str] = None,
    base_url: Optional[str] = None,
    verbose: bool = False
) -> int:
    """
    Fetch and print one listing.

    Args:
        resource_name: bookings, events, guides or holidays
        filters: Filter values to apply before the first request
        sort_by: Sort field (optional)
        order: asc or desc (optional)
        base_url: Backend base URL overriding the configuration
        verbose: Enable verbose logging output

    Returns:
        Exit code (0 for success, 1 for error)
    """
    # Set logging level based on verbose flag
    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)
        logger.debug("Verbose logging enabled")

    settings = get_browser_settings()
    if base_url:
        settings.backend.base_url = base_url
    logger.debug(f"Using configuration: {BROWSER_CONFIG}")

    try:
        async with TravelApiClient(settings.backend) as client:
            resource = build_resource(resource_name, client)
            notifications = InMemoryNotificationChannel()
            navigator = RecordingNavigator()
            controller = ListingController(resource, notifications, navigator, settings)

            try:
                controller.set_filters(filters or {})
                if sort_by is not None or order is not None:
                    controller.set_sort(sort_by, order)
            except ValueError as e:
                logger.error(f"Invalid listing options: {e}")
                print(f"Error: {e}", file=sys.stderr)
                return 1

            print(f"\n🔍 Listing {resource.plural}...")
            for name, value in controller.query.active_filters().items():
                print(f"   {name}: {value}")
            print(f"   Sort: {controller.query.sort.field} ({controller.query.sort.order})")

            start_time = datetime.now()
            controller.activate()
            await controller.wait_idle()
            elapsed_time = (datetime.now() - start_time).total_seconds()

            view = render_listing(resource, controller.snapshot())
            print(format_listing_view(view, notifications.current))

            error = controller.error
            await controller.aclose()
            notifications.close()

        if error is ErrorKind.AUTH:
            print(
                f"⚠️  Not authorized; sign in again at {settings.auth_redirect.landing_path}",
                file=sys.stderr
            )
        if error is not None:
            return 1

        logger.info(f"Listing completed in {elapsed_time:.2f} seconds")
        print(f"✅ Listing completed in {elapsed_time:.2f} seconds")
        return 0

    except KeyboardInterrupt:
        logger.info("Listing interrupted by user")
        print("\n\n⚠️  Listing interrupted by user", file=sys.stderr)
        return 130  # Standard exit code for SIGINT


def create_argument_parser() -> argparse.ArgumentParser:
    """
    Create and configure the argument parser for CLI.

    Returns:
        Configured ArgumentParser instance
    """
    parser = argparse.ArgumentParser(
        prog="travel-browse",
        description="Browse bookings, events, guides and holiday packages",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # List your bookings
  travel-browse bookings

  # Events in Lisbon on a given day, most expensive first
  travel-browse events --location Lisbon --date 2025-06-01 --sort-by price --order desc

  # All guides (free and occupied) with hiking expertise
  travel-browse guides --expertise hiking --status all

  # Holiday packages against a different backend
  travel-browse holidays --base-url https://api.example.com/api --verbose
        """
    )

    # Positional argument: resource
    parser.add_argument(
        "resource",
        choices=sorted(RESOURCE_FACTORIES),
        help="Which listing to show"
    )

    # Optional arguments: filters
    parser.add_argument("--location", type=str, default=None, help="Location filter")
    parser.add_argument("--date", type=str, default=None, help="Event date filter (YYYY-MM-DD)")
    parser.add_argument("--expertise", type=str, default=None, help="Guide expertise filter")
    parser.add_argument(
        "--status",
        choices=["free", "occupied", "all"],
        default=None,
        help="Guide availability filter (default: free)"
    )

    # Optional arguments: sort
    parser.add_argument("--sort-by", type=str, default=None, help="Sort field (e.g. price, cost, createdAt)")
    parser.add_argument("--order", choices=["asc", "desc"], default=None, help="Sort order")

    parser.add_argument("--base-url", type=str, default=None, help="Backend base URL")

    # Optional argument: verbose logging
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose logging output"
    )

    return parser


def main() -> int:
    """
    Main entry point for the CLI application.

    Returns:
        Exit code (0 for success, 1 for error)
    """
    parser = create_argument_parser()
    args = parser.parse_args()

    try:
        return asyncio.run(
            run_listing(
                resource_name=args.resource,
                filters=collect_filters(args.location, args.date, args.expertise, args.status),
                sort_by=args.sort_by,
                order=args.order,
                base_url=args.base_url,
                verbose=args.verbose
            )
        )
    except Exception as e:
        logger.exception(f"Unexpected error in main: {str(e)}")
        print(f"❌ Unexpected error: {str(e)}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
