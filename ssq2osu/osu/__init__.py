"""osu! beatmap model, .osu serializer and .osz archive writer."""
from .beatmap import Beatmap, ManiaHitCircle, ManiaHold, TimingPoint
from .osz import Archive

__all__ = ['Beatmap', 'ManiaHitCircle', 'ManiaHold', 'TimingPoint', 'Archive']
