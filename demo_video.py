#!/usr/bin/env python3
"""
Record from the camera, blur the recording, play it back and write it as a video.
Press ESC to stop recording.
"""

import logging

from darkroom.constants import C
from darkroom.params import EffectSpec, AdjustmentSpec
from darkroom.pipeline import apply_to_sequence
from darkroom.source import capture_sequence, SourceOptions, write_video
from darkroom.stage import filter_stages, SaveFramesToDirectory
from darkroom.asset import VideoAsset

if __name__=="__main__":
    import argparse
    parser = argparse.ArgumentParser(description="Record, blur, play and save a video",
                                     formatter_class=argparse.ArgumentDefaultsHelpFormatter)

    parser.add_argument("outfile", help='Video file to write.')
    parser.add_argument("--camera", help='Camera number', type=int, default=0)
    parser.add_argument("--blur", help='Blur amount', type=int, default=15)
    parser.add_argument("--brightness", help='Brightness change', type=float, default=0)
    parser.add_argument("--limit", help='Stop after this many frames', type=int)
    parser.add_argument("--workers", help='Threads for processing', type=int, default=4)
    parser.add_argument("--frames", help="Also save every frame as a JPEG in this directory")
    parser.add_argument("--verbose", help="Print stage statistics", action='store_true')
    args = parser.parse_args()
    logging.basicConfig(level=logging.INFO if args.verbose else logging.WARNING)

    (seq, fps) = capture_sequence(args.camera, SourceOptions(limit=args.limit))
    print(f"~ RECORDED {len(seq)} FRAMES AT {fps:.1f} FPS")

    stages = filter_stages(effect=EffectSpec(blur_radius=args.blur),
                           adjustment=AdjustmentSpec(brightness=args.brightness))
    if args.frames:
        stages += [ SaveFramesToDirectory(args.frames, template="{counter:08}.jpg", nonstop=True) ]
    p = apply_to_sequence(seq, stages, workers=args.workers, verbose=args.verbose)
    for notice in p.notices:
        print(notice)

    video = VideoAsset(args.outfile, source=args.camera, fps=fps)
    video.sequence = seq
    video.play()
    write_video(args.outfile, seq, fps or 1000.0/C.DEFAULT_WAIT_MS)
    print(f"~ WROTE {args.outfile}")
