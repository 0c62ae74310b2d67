from .generator import SummaryGenerator, render_profile_text

__all__ = ["SummaryGenerator", "render_profile_text"]
