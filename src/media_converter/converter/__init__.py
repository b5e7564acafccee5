"""Work distribution core: queue, worker pool, walk and cancellation."""
