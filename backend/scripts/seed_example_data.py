"""
Seed Example Data for FilaLedger

This script seeds the store with:
1. The built-in taxonomy and preset catalog (only into an empty store)
2. A handful of spools bought from those presets
3. A few print records drawing from them, one multi-material

Run with: python backend/scripts/seed_example_data.py
"""
from datetime import date, timedelta
from typing import List, Tuple

from filaledger.db.session import SessionLocal, engine, init_db
from filaledger.models.material import Material
from filaledger.schemas.material import MaterialCreate
from filaledger.services.store import Store

# (brand, main, sub, color, price, grams, days since purchase)
EXAMPLE_SPOOLS: List[Tuple[str, str, str, str, float, float, int]] = [
    ("Bambu Lab", "PLA", "Basic", "Jade White", 79.0, 1000, 40),
    ("Bambu Lab", "PLA", "Matte", "Charcoal", 89.0, 1000, 25),
    ("Bambu Lab", "PLA", "Silk", "Gold", 99.0, 1000, 12),
    ("eSUN", "PLA+", "None", "Fire Engine Red", 69.0, 1000, 60),
    ("Polymaker", "PLA", "Matte", "Muted Green", 45.0, 500, 3),
]


def seed_spools(store: Store) -> List[Material]:
    """Buy one spool per example, prefilled from the matching preset when there is one"""
    print("\n🧵 Adding example spools...")
    created = []
    for brand, main, sub, color, price, grams, age_days in EXAMPLE_SPOOLS:
        purchase_date = date.today() - timedelta(days=age_days)
        presets = [p for p in store.filter_presets(brand, main, sub) if p.color_name == color]
        if presets:
            data = MaterialCreate.from_preset(presets[0], price=price, initial_weight=grams,
                                              purchase_date=purchase_date)
        else:
            data = MaterialCreate(brand=brand, main_category=main, sub_category=sub, name=color,
                                  price=price, initial_weight=grams, purchase_date=purchase_date)
        material = store.add_material(data)
        created.append(material)
        print(f"  ✓ {material.full_name} ({material.formatted_weight}, {material.price:.2f})")
    return created


def seed_print_records(store: Store, spools: List[Material]) -> int:
    """Log a few prints against the example spools"""
    print("\n🖨️  Logging example prints...")
    white, charcoal, gold, red, green = spools
    count = 0

    for model_name, spool, grams in [
        ("Benchy", white, 15.2),
        ("Cable clips x20", charcoal, 42.0),
        ("Articulated dragon", gold, 186.5),
        ("Filament spool holder", red, 120.0),
    ]:
        if store.record_single_material_print(model_name, "", spool.id, grams):
            count += 1
            print(f"  ✓ {model_name}: {grams}g of {spool.full_name}")

    record = store.record_multi_material_print(
        "Two-tone planter",
        "https://makerworld.com/en/models/example",
        [(green.id, 210.0), (white.id, 55.0)],
    )
    if record:
        count += 1
        print(f"  ✓ {record.model_name}: {record.total_weight:.1f}g over {len(record.usages)} spools")
    return count


def main():
    """Main seed function"""
    print("=" * 60)
    print("FilaLedger Example Data Seeder")
    print("=" * 60)

    init_db(engine)
    store = Store(SessionLocal)
    seeded = store.initialize(seed_builtin=True)

    spools = seed_spools(store)
    records = seed_print_records(store, spools)

    print("\n" + "=" * 60)
    print("✅ Seeding complete!")
    print("=" * 60)
    print("\nSummary:")
    print(f"  📚 Built-in taxonomy and presets: {'seeded' if seeded else 'already present'}")
    print(f"  🧵 Spools: {len(spools)} created")
    print(f"  🖨️  Print records: {records} created")
    print(f"  💰 Consumed cost so far: {store.total_consumed_cost():.2f}")


if __name__ == "__main__":
    main()
