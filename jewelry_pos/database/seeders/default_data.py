from ...constants import DEFAULT_GOLD_RATE_24K, DEFAULT_SILVER_RATE_999
from ...modules.pricing.money import round_money
from ...modules.pricing.rates import gold_karat_ladder, silver_purity_ladder


def seed(conn):
    # first run: standard gold karat / silver purity ladders so checkout can price immediately
    row = conn.execute("SELECT COUNT(*) AS n FROM metal_rates").fetchone()
    if row and row[0] == 0:
        rows = [
            ("Gold", f"{k}K", str(round_money(r)))
            for k, r in gold_karat_ladder(DEFAULT_GOLD_RATE_24K).items()
        ] + [
            ("Silver", str(p), str(round_money(r)))
            for p, r in silver_purity_ladder(DEFAULT_SILVER_RATE_999).items()
        ]
        conn.executemany(
            "INSERT INTO metal_rates(material_name, material_type, price_per_gram) VALUES (?, ?, ?)",
            rows,
        )
        conn.commit()
