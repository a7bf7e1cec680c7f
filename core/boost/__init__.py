from core.boost.service import DeliveryBoostService, end_of_day_utc

__all__ = ['DeliveryBoostService', 'end_of_day_utc']
