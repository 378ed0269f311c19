"""Performance profiling utilities for PlaneKit."""

import time
import psutil
import functools
import gc
from typing import Dict, Any, Callable, Optional, Tuple

from ..core.packed import NB_COLOR_CHANNELS, PackedImage
from ..core.planes import ChannelPlanes


class PerformanceProfiler:
    """Performance profiler for monitoring execution time and memory usage.

    When a profiled call receives a PackedImage or ChannelPlanes, its size is
    recorded too so summaries can report filter throughput in pixels/s.
    """

    def __init__(self):
        self.metrics: Dict[str, Dict[str, Any]] = {}
        self.process = psutil.Process()

    def profile_function(self, name: str):
        """Decorator to profile function execution."""
        def decorator(func: Callable) -> Callable:
            @functools.wraps(func)
            def wrapper(*args, **kwargs):
                # Collect first so the memory delta reflects this call only
                gc.collect()

                start_time = time.time()
                start_memory = self.process.memory_info().rss

                result = func(*args, **kwargs)

                end_time = time.time()
                end_memory = self.process.memory_info().rss

                shape = _image_shape(args, kwargs)
                pixels = shape[0] * shape[1] if shape else 0

                existing = self.metrics.get(name, {
                    'total_duration': 0.0,
                    'peak_memory': start_memory,
                    'calls': 0,
                    'pixels': 0
                })

                self.metrics[name] = {
                    'duration': end_time - start_time,  # Last call duration
                    'total_duration': existing['total_duration'] + (end_time - start_time),
                    'memory_delta': end_memory - start_memory,  # Last call memory delta
                    'peak_memory': max(existing['peak_memory'], end_memory),
                    'calls': existing['calls'] + 1,
                    'shape': shape,  # Last call image (height, width)
                    'pixels': existing['pixels'] + pixels
                }
                return result
            return wrapper
        return decorator

    def get_summary(self) -> Dict[str, Any]:
        """Get performance summary."""
        if not self.metrics:
            return {
                'total_time': 0.0,
                'peak_memory_mb': 0.0,
                'by_function': {}
            }

        return {
            'total_time': sum(m['total_duration'] for m in self.metrics.values()),
            'peak_memory_mb': max(m['peak_memory'] for m in self.metrics.values()) / (1024 * 1024),
            'by_function': self.metrics
        }

    def print_summary(self, title: str = "Performance Summary"):
        """Print formatted performance summary."""
        summary = self.get_summary()

        print(f"\n📊 {title}")
        print("=" * len(title) + "===")
        print(f"Total Time: {summary['total_time']:.2f}s")
        print(f"Peak Memory: {summary['peak_memory_mb']:.1f}MB")
        print()

        if summary['by_function']:
            print("By Function:")
            for name, metrics in summary['by_function'].items():
                print(f"  {name}:")
                print(f"    Time: {metrics['total_duration']:.3f}s")
                print(f"    Memory: {metrics['memory_delta'] / (1024 * 1024):+.1f}MB")
                print(f"    Calls: {metrics['calls']}")
                if metrics['shape']:
                    height, width = metrics['shape']
                    print(f"    Image: {width}x{height} ({pixels_per_second(metrics) / 1e6:.2f} Mpx/s)")

    def reset(self) -> None:
        self.metrics.clear()


def _image_shape(args, kwargs) -> Optional[Tuple[int, int]]:
    """(height, width) of the first PackedImage or ChannelPlanes argument."""
    for value in list(args) + list(kwargs.values()):
        if isinstance(value, (PackedImage, ChannelPlanes)):
            return tuple(value.shape)
    return None


def pixels_per_second(metrics: Dict[str, Any]) -> float:
    """Filter throughput from one function's metrics."""
    if metrics['total_duration'] <= 0:
        return 0.0
    return metrics['pixels'] / metrics['total_duration']


def estimate_memory_usage(width: int, height: int, working_copies: int = 4) -> float:
    """Estimate memory in MB to filter an image of the given size.

    Counts the packed uint32 grid plus ``working_copies`` float64 plane
    stacks (input, output and the temporaries of e.g. unsharp masking).
    """
    pixels = width * height
    packed = pixels * 4
    planes = pixels * NB_COLOR_CHANNELS * 8 * working_copies
    return (packed + planes) / (1024 * 1024)


# Global profiler instance for easy access
global_profiler = PerformanceProfiler()
