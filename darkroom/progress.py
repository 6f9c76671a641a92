"""
A textual progress bar that can be ticked from several threads at once.

    ~ LOADING [████      ]

The bar is redrawn at PROGRESS_STEPS evenly spaced checkpoints,
every max(1, total // PROGRESS_STEPS) frames.
"""

import sys
import threading

from .constants import C


class ProgressBar:
    def __init__(self, total, *, out=sys.stdout, steps=C.PROGRESS_STEPS, label="LOADING"):
        self.total = total
        self.out   = out
        self.steps = steps
        self.label = label
        self.count = 0
        self.drawn = 0
        self.interval = max(1, total // steps)
        self.lock = threading.Lock()

    def notice(self, msg, endl=False):
        """Display a message"""
        print("\r" + msg + "\033[K", end="", file=self.out) # print and clear to end of line
        if endl:
            print("", file=self.out)           # next line
        self.out.flush()

    def draw(self):
        filled = min(self.drawn, self.steps)
        self.notice(f"~ {self.label} [" + C.PROGRESS_CHAR*filled + " "*(self.steps-filled) + "]")

    def start(self):
        with self.lock:
            self.draw()

    def tick(self):
        """One more frame is done. Returns the count so far."""
        with self.lock:
            self.count += 1
            if self.count % self.interval == 0 or self.count == self.total:
                self.drawn = min(self.steps, self.count * self.steps // max(1,self.total))
                self.draw()
            return self.count

    def finish(self):
        with self.lock:
            self.drawn = self.steps
            self.draw()
            self.notice("~ FINISHED", endl=True)
