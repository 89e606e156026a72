"""Command-line interface for divino."""

import argparse
import logging
import sys

from pydantic import TypeAdapter

from divino import __version__
from divino.core import open_session
from divino.exceptions import DivinoError
from divino.navigation import Screen
from divino.pricing import compare_menu_price, purchase_url
from divino.providers.base import ScanMode
from divino.ranking import SortMode, rank_wines
from divino.schema import WineRecord

_WINE_LIST = TypeAdapter(list[WineRecord])


def _build_parser() -> argparse.ArgumentParser:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--api-key", help="Gemini API key (default: GEMINI_API_KEY env var)")
    common.add_argument("--provider", help="Provider name: gemini or sample (default: DIVINO_PROVIDER)")
    common.add_argument("--json", action="store_true", help="Output as JSON")
    common.add_argument(
        "--sort",
        choices=[mode.value for mode in SortMode],
        default=SortMode.VALUE.value,
        help="Result order (default: value)",
    )
    common.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

    parser = argparse.ArgumentParser(
        prog="divino",
        description="Identify wines from photos or names and keep a personal cellar",
    )
    parser.add_argument("--version", action="version", version=f"divino {__version__}")
    commands = parser.add_subparsers(dest="command", required=True)

    scan = commands.add_parser("scan", parents=[common], help="Identify wines in a photo")
    scan.add_argument("image", help="Path to a bottle, menu or wall-of-bottles photo")
    scan.add_argument(
        "--mode",
        choices=[mode.value for mode in ScanMode],
        default=ScanMode.BOTTLE.value,
        help="What the photo shows (default: bottle)",
    )

    search = commands.add_parser("search", parents=[common], help="Look up a wine by name")
    search.add_argument("query")

    similar = commands.add_parser("similar", parents=[common], help="Suggest wines similar to a named wine")
    similar.add_argument("query")

    ask = commands.add_parser("ask", parents=[common], help="Ask the sommelier about a wine")
    ask.add_argument("query")
    ask.add_argument("question")

    favorite = commands.add_parser("favorite", parents=[common], help="Add or remove a wine from the cellar")
    favorite.add_argument("query")

    commands.add_parser("cellar", parents=[common], help="List the wines in your cellar")
    commands.add_parser("recent", parents=[common], help="Show recent searches")
    return parser


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    args = _build_parser().parse_args(argv)
    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    try:
        session = open_session(api_key=args.api_key, provider=args.provider)
    except (DivinoError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    session.change_sort(args.sort)

    if args.command == "cellar":
        _print_wines(session.cellar.newest_first(), args, title="La mia Cantina")
        return 0
    if args.command == "recent":
        for query in session.context.recent_searches:
            print(query)
        return 0

    if args.command == "scan":
        context = session.scan(args.image, args.mode)
    else:
        context = session.search(args.query)
    if context.error:
        print(f"Error: {context.error}", file=sys.stderr)
        return 1

    if args.command == "similar":
        if context.selected is None and context.results:
            session.select(rank_wines(list(context.results), args.sort).wines[0])
        context = session.find_similar()
        if context.error:
            print(f"Error: {context.error}", file=sys.stderr)
            return 1

    if args.command in {"ask", "favorite"}:
        wine = context.selected or rank_wines(list(context.results), args.sort).wines[0]
        if args.command == "ask":
            print(session.ask(args.question, wine))
        else:
            session.toggle_favorite(wine)
            state = "added to" if session.is_favorite(wine) else "removed from"
            print(f"{wine.name} {state} the cellar")
        return 0

    if context.screen is Screen.DETAIL and context.selected is not None and not args.json:
        _print_detail(context.selected, in_cellar=session.is_favorite(context.selected))
    else:
        ranked = session.ranked_results()
        _print_wines(ranked.wines, args, badge=ranked.badge_label)
    return 0


def _print_wines(wines: list[WineRecord], args, *, title: str = "Risultati", badge: str | None = None) -> None:
    if args.json:
        print(_WINE_LIST.dump_json(wines, indent=2, exclude_none=True).decode("utf-8"))
        return

    print()
    print(f"  {title} ({len(wines)})")
    print()
    for index, wine in enumerate(wines, start=1):
        rating = f"{wine.star_rating:.1f}/5" if wine.rating else "-"
        price = f"{wine.menu_price:g} (menu)" if wine.menu_price else (wine.price_estimate or "-")
        marker = f"  [{badge}]" if badge and index == 1 else ""
        print(f"  {index}. {_title(wine)}  {rating}  {price}{marker}")
    print()


def _print_detail(wine: WineRecord, *, in_cellar: bool = False) -> None:
    """Print one wine in human-readable format."""
    print()
    print(f"  {_title(wine)}")
    print()

    comparison = compare_menu_price(wine)
    fields = [
        ("Tipo", wine.wine_type.label),
        ("Regione", _format_list([wine.region, wine.country])),
        ("Voto", f"{wine.star_rating:.1f}/5" if wine.rating else None),
        ("Prezzo", wine.price_estimate),
        ("Menu", f"{wine.menu_price:g}" if wine.menu_price else None),
        ("Ricarico", f"{comparison.difference_percent:+d}%" if comparison else None),
        ("Vitigni", _format_list(wine.grapes)),
        ("Abbinamenti", _format_list(wine.food_pairing)),
        ("Descrizione", wine.description),
        ("Cantina", "si" if in_cellar else "no"),
        ("Acquista", purchase_url(wine)),
    ]
    for label, value in fields:
        display = value if value else "-"
        print(f"  {label + ':':<14} {display}")

    print()
    for axis, value in wine.display_taste_profile().items():
        print(f"  {axis + ':':<14} {'#' * round(value / 10):<10} {value:.0f}")
    print()


def _title(wine: WineRecord) -> str:
    parts = [wine.name]
    if wine.producer:
        parts.append(wine.producer)
    return " / ".join(parts) + (f" ({wine.vintage})" if wine.vintage else "")


def _format_list(items: list[str]) -> str | None:
    """Format list as comma-separated string."""
    values = [item for item in items if item]
    if not values:
        return None
    return ", ".join(values)


if __name__ == "__main__":
    sys.exit(main())
