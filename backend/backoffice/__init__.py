"""Financial back-office API with automatic cost-center assignment."""
