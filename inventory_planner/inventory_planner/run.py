from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path

from . import config, data, loader
from .engine import InventoryEngine
from .logging_config import configure_logging
from .serialize import report_to_dict

logger = logging.getLogger(__name__)


def _read(path: str | None) -> bytes | None:
    return Path(path).read_bytes() if path else None


def build_engine(args: argparse.Namespace) -> InventoryEngine:
    products = loader.load_products(_read(args.products)) or data.sample_products()
    loader.apply_stock(products, loader.load_stock(_read(args.stock)))
    return InventoryEngine(
        products=products,
        warehouses=loader.load_warehouses(_read(args.warehouses)) or data.sample_warehouses(),
        supplier_info=loader.load_supplier_info(_read(args.suppliers)) or data.sample_supplier_info(),
        sales=loader.load_sales(_read(args.sales)) or data.sample_sales(),
        lookback_days=args.lookback_days,
    )


def main(argv: list[str] | None = None) -> Path:
    parser = argparse.ArgumentParser(description="Demand-driven replenishment run")
    parser.add_argument("--products", help="products JSON")
    parser.add_argument("--warehouses", help="warehouses JSON")
    parser.add_argument("--stock", help="stock rows (JSON or CSV)")
    parser.add_argument("--suppliers", help="supplier product info JSON")
    parser.add_argument("--sales", help="sales orders (JSON or CSV)")
    parser.add_argument("--forecast-days", type=int, default=config.FORECAST_PERIOD_DAYS)
    parser.add_argument("--lookback-days", type=int, default=config.LOOKBACK_DAYS)
    parser.add_argument("--output-dir", default=str(config.OUTPUT_DIR))
    parser.add_argument("--log-level", default=None)
    args = parser.parse_args(argv)

    configure_logging(args.log_level)
    engine = build_engine(args)
    report = engine.scheduler.run(args.forecast_days)

    out_dir = Path(args.output_dir)
    out_dir.mkdir(parents=True, exist_ok=True)
    out_file = out_dir / "replenishment_run.json"
    out_file.write_text(json.dumps(report_to_dict(report), indent=2))
    logger.info("report written to %s", out_file)
    return out_file


if __name__ == "__main__":
    main()
