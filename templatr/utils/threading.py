import asyncio
from concurrent.futures import Executor
from typing import Optional


# Function to run CPU-bound rendering in a separate thread
async def run_in_threadpool(thread_pool: Optional[Executor], func, *args, **kwargs):
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(thread_pool, lambda: func(*args, **kwargs))
