__all__ = ("DECIMAL_PRECISION",)

# Significant digits for LP token pricing, debt adjustment and debt accumulation
DECIMAL_PRECISION = 60
