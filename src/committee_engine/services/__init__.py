"""Service layer: governance rules, eligibility, seats, designation weight, membership workflows."""
