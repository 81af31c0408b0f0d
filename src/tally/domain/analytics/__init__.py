"""Analytics domain: bucketing, trend analysis, forecasting and insight rules."""
