"""Infrastructure implementations for guest_knows."""
