import numpy as np
import pygame
from markus_diagram import ComputeDiagram

class DiagramViewer(ComputeDiagram):
    TITLE = "Lyapunov-Markus diagram - press ESC to exit"
    FPS = 60
    BATCH_ROWS = 16
    BACKGROUND = (0, 0, 20)

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.running = False

    # closing the window and ESC end the program, during the sweep as well as after it
    def exit_requested(self):
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                self.running = False
            if event.type == pygame.KEYDOWN and event.key == pygame.K_ESCAPE:
                self.running = False
        return not self.running

    def make_surface(self):
        # surfarray is indexed (x, y)
        return pygame.surfarray.make_surface(np.swapaxes(self.to_rgb_array(), 0, 1))

    def run(self):
        pygame.init()

        clock = pygame.time.Clock()

        display = pygame.display.set_mode((self.width, self.height), pygame.RESIZABLE)
        pygame.display.set_caption(self.TITLE)
        display.fill(self.BACKGROUND)
        pygame.display.flip()

        self.running = True
        self.compute_diagram(should_abort=self.exit_requested, batch_rows=self.BATCH_ROWS)

        if not self.aborted:
            # the finished buffer is handed to the window once
            surface = self.make_surface()
            while not self.exit_requested():
                display.fill(self.BACKGROUND)
                display.blit(pygame.transform.scale(surface, display.get_size()), (0, 0))
                pygame.display.flip()
                clock.tick(self.FPS)

        pygame.quit()
        return self.buffer
