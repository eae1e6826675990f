"""Committee membership eligibility, seat allocation and designation-weight engine."""
