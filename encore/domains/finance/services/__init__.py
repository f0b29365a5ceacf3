from encore.domains.finance.services.errors import DataAccessError, ForecastError
from encore.domains.finance.services.forecast_repository import (
    ForecastRepository,
    SqlAlchemyForecastRepository,
)
from encore.domains.finance.services.forecast_service import (
    ForecastResult,
    MonthlyForecast,
    generate_forecast,
)

__all__ = [
    "generate_forecast",
    "ForecastResult",
    "MonthlyForecast",
    "ForecastRepository",
    "SqlAlchemyForecastRepository",
    "ForecastError",
    "DataAccessError",
]
