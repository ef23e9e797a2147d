"""
Main entry point for the Local Deals discovery CLI.
"""

import argparse
import asyncio
import sys
from typing import List, Optional

from .components.categories import get_category_label
from .components.clustering import ClusteringEngine
from .components.deal_utils import get_urgency_label, location_text
from .components.filter_engine import RADIUS_OPTIONS_KM
from .components.geolocation_providers import FixedPositionProvider, IPGeolocationClient
from .components.location_strategy import LocationAcquisitionStrategy
from .models.filter import FeedMode, FilterState
from .services.config_manager import ConfigurationManager
from .services.deal_repository import create_repository
from .services.discovery_service import DiscoveryService
from .utils.logging import get_logger, setup_logging


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="local-deals", description="Browse local deals near a location"
    )
    parser.add_argument("--config", help="Path to configuration file")
    parser.add_argument("--category", default="all", help="Category filter value")
    parser.add_argument("--search", default="", help="Case-insensitive search text")
    parser.add_argument(
        "--mode",
        choices=[mode.value for mode in FeedMode],
        help="Feed ordering when near-me is off",
    )
    parser.add_argument(
        "--radius",
        type=float,
        help=f"Near-me radius in km (UI offers {', '.join(map(str, RADIUS_OPTIONS_KM))})",
    )
    parser.add_argument("--near-me", action="store_true", help="Filter by distance")
    parser.add_argument("--lat", type=float, help="Device latitude")
    parser.add_argument("--lng", type=float, help="Device longitude")
    parser.add_argument("--verified-only", action="store_true")
    parser.add_argument("--show-expired", action="store_true")
    parser.add_argument("--zoom", type=float, help="Print map pins at this zoom level")
    parser.add_argument("--log-dir", default="logs")
    return parser


def render_list(service: DiscoveryService) -> List[str]:
    lines = []
    for deal, distance in service.list_view_with_distances():
        bits = [deal.title, location_text(deal)]
        if deal.category:
            bits.append(get_category_label(deal.category))
        if distance is not None:
            bits.append(f"{distance:.1f} km")
        urgency = get_urgency_label(deal.valid_till_date)
        if urgency:
            bits.append(urgency)
        lines.append(" | ".join(bits))

    if not lines:
        lines.append("No deals match the current filters.")
    return lines


def render_pins(service: DiscoveryService, zoom: float) -> List[str]:
    lines = []
    for pin in service.map_view(zoom):
        if pin.is_cluster:
            marker = "cluster*" if pin.has_verified else "cluster"
            lines.append(
                f"{marker} x{pin.count} @ {pin.latitude:.5f},{pin.longitude:.5f}"
            )
        else:
            deal = pin.member_deals[0]
            lines.append(f"{deal.title} @ {pin.latitude:.5f},{pin.longitude:.5f}")

    if not lines:
        lines.append("No deals to show on the map.")
    return lines


async def async_main(argv: Optional[List[str]] = None) -> int:
    """Async main application entry point."""
    args = build_parser().parse_args(argv)

    config = ConfigurationManager(args.config).load_config()
    setup_logging(log_dir=args.log_dir, log_level=config.log_level)
    logger = get_logger("main")

    filter_state = FilterState(
        category=args.category,
        search_text=args.search,
        radius_km=(
            args.radius if args.radius is not None else config.defaults.radius_km
        ),
        verified_only=args.verified_only,
        feed_mode=FeedMode(args.mode or config.defaults.feed_mode),
        show_expired=args.show_expired or config.defaults.show_expired,
    )
    filter_state.validate()

    device_provider = None
    if args.lat is not None and args.lng is not None:
        device_provider = FixedPositionProvider(args.lat, args.lng)

    async with IPGeolocationClient(config.ip_geolocation_url) as ip_client:
        strategy = LocationAcquisitionStrategy(device_provider, ip_client, config.location)
        service = DiscoveryService(
            repository=create_repository(config.repository),
            location_strategy=strategy,
            clustering_engine=ClusteringEngine(config.clustering),
            filter_state=filter_state,
        )

        service.load_deals()

        if args.near_me:
            state = await service.toggle_near_me(True)
            if state.coordinate is None:
                print(f"Location unavailable ({state.status.value}); showing all deals.")

    lines = render_pins(service, args.zoom) if args.zoom is not None else render_list(service)
    for line in lines:
        print(line)

    logger.info("Rendered deals", extra={"lines": len(lines)})
    return 0


def main():
    """Main application entry point."""
    try:
        sys.exit(asyncio.run(async_main()))
    except KeyboardInterrupt:
        print("\nShutdown requested by user")
    except Exception as e:
        print(f"Fatal error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
