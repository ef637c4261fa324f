"""memoflow: chat with durable per-user memory and asynchronous summarization."""
