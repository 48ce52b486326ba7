"""Algorithm metrics (FCFS / LJF / LIFO) fetched from the service."""
