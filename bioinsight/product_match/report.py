"""
Report Generator - Format results for human consumption.

Produces console output for matches, alternatives and recommendations,
and CSV export for batch match results.
"""

import csv
import io
from typing import TextIO

from .matcher import sort_results_for_report, summarize_results
from .models import MatchResult, MatchTier, RecommendationResult, SimilarityResult


def format_console(results: list[MatchResult], show_matched: bool = False) -> str:
    """
    Format batch match results for console display.

    Rows needing review (UNMATCHED, then FUZZY_NAME) come first.

    Args:
        results: Match results to format
        show_matched: Whether to include catalog-number matches (default False)

    Returns:
        Formatted string for console output
    """
    if not results:
        return "No purchase rows to report.\n"

    lines = []
    sorted_results = sort_results_for_report(results)

    unmatched = [r for r in sorted_results if r.tier == MatchTier.UNMATCHED]
    fuzzy = [r for r in sorted_results if r.tier == MatchTier.FUZZY_NAME]
    catalog = [
        r for r in sorted_results
        if r.tier in (MatchTier.EXACT_CATALOG, MatchTier.PREFIX_CATALOG)
    ] if show_matched else []

    if unmatched:
        lines.append(f"\nUNMATCHED ({len(unmatched)}) - No catalog product found")
        lines.append("-" * 70)
        lines.append(f"{'ITEM NAME':<35} {'CATALOG #':<15} {'REASON':<20}")
        lines.append("-" * 70)
        for r in unmatched:
            name, number = _row_fields(r)
            lines.append(f"{name[:35]:<35} {number[:15]:<15} {r.reason[:40]}")

    if fuzzy:
        lines.append(f"\nFUZZY MATCHES ({len(fuzzy)}) - Check before linking")
        lines.append("-" * 70)
        lines.append(f"{'ITEM NAME':<30} {'CONF':>6}  {'MATCHED PRODUCT':<30}")
        lines.append("-" * 70)
        for r in fuzzy:
            name, _ = _row_fields(r)
            matched = r.matched_name or r.product_id or ""
            lines.append(f"{name[:30]:<30} {r.confidence:>6.2f}  -> {matched[:30]}")

    if catalog:
        lines.append(f"\nCATALOG NUMBER MATCHES ({len(catalog)})")
        lines.append("-" * 70)
        for r in catalog:
            name, _ = _row_fields(r)
            lines.append(f"{r.tier.value:<15} {(r.matched_catalog_number or '')[:15]:<15} {name[:35]}")

    summary = summarize_results(results)
    lines.append("\n" + "=" * 70)
    lines.append("SUMMARY")
    lines.append(f"  Total rows:     {summary['total']}")
    lines.append(f"  Exact catalog:  {summary['exact_catalog']}")
    lines.append(f"  Prefix catalog: {summary['prefix_catalog']}")
    lines.append(f"  Fuzzy name:     {summary['fuzzy_name']}")
    lines.append(f"  Unmatched:      {summary['unmatched']}")
    lines.append(f"  Actionable:     {summary['actionable']}")
    lines.append("=" * 70)

    return "\n".join(lines)


def _row_fields(result: MatchResult) -> tuple[str, str]:
    if result.record is None:
        return "", ""
    return result.record.item_name or "", result.record.catalog_number or ""


def format_alternatives(product_id: str, results: list[SimilarityResult]) -> str:
    """Format substitute products for console display."""
    if not results:
        return f"No alternatives found for {product_id}.\n"

    lines = [f"\nALTERNATIVES FOR {product_id}", "-" * 70]
    for r in results:
        price = f"{r.cheapest_offer.price:,} {r.cheapest_offer.currency}" if r.cheapest_offer else "N/A"
        lines.append(f"{r.score:>5.2f}  {r.product.name[:40]:<40} {price:>18}")
        lines.append(f"       {', '.join(r.reasons)}")
    return "\n".join(lines)


def format_recommendations(result: RecommendationResult) -> str:
    """Format ranked offers, rejections and the bundle for console display."""
    lines = ["\nRECOMMENDATIONS", "-" * 70]
    if not result.ranked:
        lines.append("No product satisfies the constraints.")
    for p in result.ranked:
        lead = f"{p.offer.lead_time_days}d" if p.offer.lead_time else "-"
        lines.append(
            f"{p.score:>6.1f}  {p.product.name[:30]:<30} {p.offer.vendor_id[:12]:<12} "
            f"{p.offer.price:>12,} {lead:>5}  {', '.join(p.reasons)}"
        )

    if result.rejected:
        lines.append(f"\nREJECTED ({len(result.rejected)})")
        lines.append("-" * 70)
        for r in result.rejected:
            lines.append(f"{r.product_id:<30} {', '.join(r.reasons)}")

    if result.bundle is not None:
        bundle = result.bundle
        average = f"{bundle.average_lead_time:.1f} days" if bundle.average_lead_time is not None else "N/A"
        lines.append("\n" + "=" * 70)
        lines.append("BUNDLE")
        lines.append(f"  Selected:         {len(bundle.selected)}")
        lines.append(f"  Total price:      {bundle.total_price:,}")
        lines.append(f"  Remaining budget: {bundle.remaining_budget:,}")
        lines.append(f"  Mean lead time:   {average}")
        lines.append("=" * 70)

    return "\n".join(lines)


def export_csv(
    results: list[MatchResult],
    output: TextIO | None = None,
    include_matched: bool = True,
) -> str:
    """
    Export batch match results to CSV format.

    Args:
        results: Match results to export
        output: Optional file handle to write to
        include_matched: Whether to include catalog-number matches (default True)

    Returns:
        CSV string (also writes to output if provided)
    """
    buffer = io.StringIO()
    writer = csv.writer(buffer)

    writer.writerow([
        "item_name",
        "catalog_number",
        "vendor_hint",
        "quantity",
        "tier",
        "confidence",
        "product_id",
        "matched_catalog_number",
        "matched_name",
        "reason",
    ])

    for result in results:
        if not include_matched and result.tier in (MatchTier.EXACT_CATALOG, MatchTier.PREFIX_CATALOG):
            continue

        record = result.record
        writer.writerow([
            record.item_name if record else "",
            (record.catalog_number or "") if record else "",
            (record.vendor_hint or "") if record else "",
            str(record.quantity) if record else "",
            result.tier.value,
            f"{result.confidence:.4f}",
            result.product_id or "",
            result.matched_catalog_number or "",
            result.matched_name or "",
            result.reason,
        ])

    csv_content = buffer.getvalue()

    if output:
        output.write(csv_content)

    return csv_content
