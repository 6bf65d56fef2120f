import sys
import os

# Add project root to sys.path
sys.path.append(os.getcwd())

from loaders import read_grid, resolve_headers, load_packing_data, load_leftovers, total_quantity

def inspect_sheet(path):
    grid = read_grid(path)
    header_idx, roles = resolve_headers(grid)
    print(f"Rows: {len(grid)}, widest row: {grid.width}")
    print(f"Header row: {header_idx}")
    for role, label in roles.as_dict().items():
        print(f" - {role:<12} -> {label}")

    result = load_packing_data(path)
    print("\nFirst records:")
    for r in result.records[:20]:
        print(f"  {r.ordinal:>4} | {r.date} | {r.party} | {r.description} | {r.packing} | {r.quantity}")

    print(f"\nTotal quantity: {total_quantity(result.records)}")
    print(f"Descriptions: {result.descriptions}")
    print(f"Packings: {result.packings}")

def inspect_leftovers(purchase_path, usage_path):
    rows = load_leftovers(purchase_path, usage_path)
    for r in rows:
        print(f"  {r.description:<30} {r.packing:<10} {r.purchased:>8} {r.used:>8} {r.leftover:>8}")

if __name__ == "__main__":
    if len(sys.argv) == 2:
        inspect_sheet(sys.argv[1])
    elif len(sys.argv) == 3:
        inspect_leftovers(sys.argv[1], sys.argv[2])
    else:
        print("Usage: python scripts/inspect_sheet.py <sheet> [usage-sheet]")
        sys.exit(1)
