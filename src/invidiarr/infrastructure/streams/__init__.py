from .probe import probe_stream_url
from .selector import StreamSelector, rank_audio

__all__ = ["StreamSelector", "probe_stream_url", "rank_audio"]
