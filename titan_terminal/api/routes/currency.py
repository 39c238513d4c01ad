"""
Currency table routes - display picker data.
"""

from fastapi import APIRouter

from titan_terminal.domain.services.currency_service import supported_currencies

router = APIRouter()


@router.get("")
async def list_currencies():
    """Supported display currencies with their static USD rates."""
    return [
        {
            "code": info.code.value,
            "symbol": info.symbol,
            "locale": info.locale,
            "rate": info.rate,
            "name": info.name,
        }
        for info in supported_currencies()
    ]
