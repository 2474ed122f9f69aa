"""Portfolio data loading utilities.

Responsible for turning collaborator-supplied asset data (records or a
pandas DataFrame) into immutable Asset instances ready for optimization.
"""

from dataclasses import dataclass
from typing import Any, Iterable, List, Mapping

import pandas as pd

from finance.errors import InvalidInputError


@dataclass(frozen=True)
class Asset:
    """A single investable asset.
    
    Attributes:
        id: Stable identifier supplied by the collaborator
        name: Ticker or display name (also names the decision variable)
        price: Last price (display only, unused by the optimizer)
        expected_return: Expected return coefficient
        volatility: Volatility coefficient (non-negative)
    """
    id: int
    name: str
    price: float
    expected_return: float
    volatility: float


REQUIRED_FIELDS = ('id', 'name', 'price', 'expected_return', 'volatility')


class PortfolioDataLoader:
    """Loads and prepares asset data."""
    
    @staticmethod
    def load_from_records(records: Iterable[Mapping[str, Any]]) -> List[Asset]:
        """Build assets from dictionaries.
        
        Accepts 'return' as an alias for 'expected_return'.
        
        Args:
            records: Iterable of mappings with id, name, price, expected_return, volatility
            
        Returns:
            List of Asset in input order
            
        Raises:
            InvalidInputError: If a record is missing a field or has a non-numeric value
        """
        assets = []
        for position, record in enumerate(records):
            record = dict(record)
            if 'expected_return' not in record and 'return' in record:
                record['expected_return'] = record.pop('return')
            missing = [field for field in REQUIRED_FIELDS if field not in record]
            if missing:
                raise InvalidInputError(f"asset record {position} missing fields {missing}")
            try:
                assets.append(Asset(
                    id=int(record['id']),
                    name=str(record['name']),
                    price=float(record['price']),
                    expected_return=float(record['expected_return']),
                    volatility=float(record['volatility'])
                ))
            except (TypeError, ValueError) as e:
                raise InvalidInputError(f"asset record {position} is malformed: {e}") from e
        return assets
    
    @staticmethod
    def load_from_dataframe(frame: pd.DataFrame) -> List[Asset]:
        """Build assets from a DataFrame with one row per asset.
        
        Args:
            frame: DataFrame with columns id, name, price, expected_return
                (or return), volatility
            
        Returns:
            List of Asset in row order
        """
        return PortfolioDataLoader.load_from_records(frame.to_dict(orient='records'))
    
    @staticmethod
    def get_4asset_example() -> List[Asset]:
        """Returns the fixed 4-stock example universe.
        
        - AAPL: σ = 0.20, μ = 0.12
        - GOOGL: σ = 0.25, μ = 0.15
        - MSFT: σ = 0.18, μ = 0.10 (lowest volatility)
        - AMZN: σ = 0.28, μ = 0.18 (highest volatility and return)
        
        Returns:
            List of four Asset
        """
        return [
            Asset(id=1, name='AAPL', price=150.25, expected_return=0.12, volatility=0.20),
            Asset(id=2, name='GOOGL', price=2750.80, expected_return=0.15, volatility=0.25),
            Asset(id=3, name='MSFT', price=305.50, expected_return=0.10, volatility=0.18),
            Asset(id=4, name='AMZN', price=3380.20, expected_return=0.18, volatility=0.28),
        ]
