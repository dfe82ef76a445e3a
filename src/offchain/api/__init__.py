"""HTTP gateway for off-chain documents."""
