from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel
from typing import Any, Dict, List, Optional, Union

from checkout_pricing import __version__
from checkout_pricing.checkout import Checkout
from checkout_pricing.config.settings import Settings, get_settings
from checkout_pricing.exceptions import CheckoutError, InvalidItemError
from checkout_pricing.rules.rule_table import read_rule_table

app = FastAPI(
    title="Checkout Pricing API",
    description="Tiered checkout totals for order-processing flows",
    version=__version__
)

# Enable CORS for frontend development
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)


class TotalRequest(BaseModel):
    # Omitted rules fall back to the configured rule table
    rules: Optional[Union[str, List[Union[str, Dict[str, Any]]]]] = None
    items: List[Union[str, List[Union[str, int]]]] = []
    rule_delimiter: Optional[str] = None
    field_delimiter: Optional[str] = None
    strict: Optional[bool] = None


def _default_rules(settings: Settings):
    if settings.rules_file is None:
        return None
    return read_rule_table(settings.rules_file)


@app.get("/")
async def root():
    return {"status": "online", "message": "Checkout Pricing API Active"}


@app.post("/total")
async def checkout_total(req: TotalRequest):
    settings = get_settings()
    rules = req.rules
    if rules is None:
        # A broken configured rule table is a server fault
        try:
            rules = _default_rules(settings)
        except (FileNotFoundError, ValueError) as e:
            raise HTTPException(status_code=500, detail=str(e))

    try:
        checkout = Checkout(
            rules,
            rule_delimiter=settings.rule_delimiter if req.rule_delimiter is None else req.rule_delimiter,
            field_delimiter=settings.field_delimiter if req.field_delimiter is None else req.field_delimiter,
            strict=settings.strict if req.strict is None else req.strict,
        )
        checkout.add_multiple(req.items)
        result = checkout.calculate()
    except InvalidItemError as e:
        raise HTTPException(status_code=422, detail=str(e))
    except CheckoutError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return result.to_dict()


@app.get("/system/status")
async def get_status():
    settings = get_settings()
    return {
        "engine_active": True,
        "version": __version__,
        "rule_delimiter": settings.rule_delimiter,
        "field_delimiter": settings.field_delimiter,
        "strict": settings.strict,
        "rules_file": str(settings.rules_file) if settings.rules_file else None,
    }


def run():
    """Serve the API with uvicorn (``checkout-api`` console script)."""
    import os
    import uvicorn

    port = int(os.environ.get("CHECKOUT_PORT", "8000"))
    print(f"Starting Checkout Pricing API (FastAPI) on port {port}...")
    uvicorn.run("checkout_pricing.api.main:app", host="0.0.0.0", port=port)


if __name__ == "__main__":
    run()
