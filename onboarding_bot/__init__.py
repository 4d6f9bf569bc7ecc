"""Command-line assistant that collects a business onboarding record."""
