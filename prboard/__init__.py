"""PR approval board: open GitHub pull requests ranked by approvals."""
