"""Full-text movie search over MongoDB Atlas Search."""
