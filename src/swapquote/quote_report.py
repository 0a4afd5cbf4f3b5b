"""Quote report logging.

Provenance reports for quotes a taker intends to fill are written to their
own logger so they can be routed separately from application logs.
"""

import logging
from decimal import Decimal
from typing import Optional

from swapquote.web.contracts.swap import QuoteReport

logger = logging.getLogger(__name__)


class QuoteReportLogger:
    """Writes quote provenance reports to the ``swapquote.quote_report`` channel."""

    def __init__(self, channel: Optional[logging.Logger] = None):
        self._logger = channel or logger

    def log_quote_report(
        self,
        quote_report: QuoteReport,
        submission_by: str,
        buy_token_address: str,
        sell_token_address: str,
        buy_amount: Optional[Decimal] = None,
        sell_amount: Optional[Decimal] = None,
        decoded_unique_id: Optional[str] = None,
    ) -> dict:
        """Log a report and return the record that was written."""
        record = {
            "quoteReport": quote_report.model_dump(mode="json", by_alias=True),
            "submissionBy": submission_by,
            "decodedUniqueId": decoded_unique_id,
            "buyTokenAddress": buy_token_address,
            "sellTokenAddress": sell_token_address,
            "buyAmount": str(buy_amount) if buy_amount is not None else None,
            "sellAmount": str(sell_amount) if sell_amount is not None else None,
        }
        self._logger.info("quoteReport %s", record)
        return record
