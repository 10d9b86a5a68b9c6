import math

import torch

import torchcqt
from torchcqt import create_parameters, create_transform

torchcqt.logging.enable_logging(level="DEBUG")

# 85 semitone bins from 30 Hz to 4 kHz
params = create_parameters(30.0, 4000.0, 12, 44000.0, 4096)
cqt = create_transform(params, hop_size=512)

# One second of A4 + E5
t = torch.arange(44000) / 44000.0
signal = torch.sin(2 * math.pi * 440.0 * t) + 0.5 * torch.sin(2 * math.pi * 659.25 * t)

features = cqt.process(signal)
print(features.shape)  # (n_frames, n_bins)

peaks = features.mean(dim=0).topk(2).indices
for k in peaks.tolist():
    print(f"bin {k}: {cqt.center_frequencies[k]:.1f} Hz")

# Stereo input gives one matrix per channel
stereo = torch.stack([signal, signal.flip(0)])
print(cqt(stereo).shape)  # (2, n_frames, n_bins)
