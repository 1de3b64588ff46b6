"""Conversion of decoded step charts into osu!mania beatmaps."""
from .shock import ShockAction, ShockStepGenerator
from .ddr2osu import ChartTranslator, ConvertedChart, ssq_to_beatmaps, tempo_to_timing_points

__all__ = ['ShockAction', 'ShockStepGenerator', 'ChartTranslator', 'ConvertedChart',
           'ssq_to_beatmaps', 'tempo_to_timing_points']
