"""marketsearch: predictive search aggregator for marketplace listings and creators."""
