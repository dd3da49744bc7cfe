import logging
from ctypes import c_void_p

import glfw
import numpy as np
from OpenGL.GL import *  # type: ignore
from OpenGL.GL import shaders

from .renderer import unpack_rgba

logger = logging.getLogger(__name__)

VERT_SRC = """
#version 330 core
layout (location = 0) in vec2 aPos;
layout (location = 1) in vec2 aTexCoord;
out vec2 TexCoord;
void main() {
    gl_Position = vec4(aPos, 0.0, 1.0);
    TexCoord = aTexCoord;
}"""

FRAG_SRC = """
#version 330 core
in vec2 TexCoord;
out vec4 FragColor;
uniform sampler2D screenTexture;
void main() {
    FragColor = texture(screenTexture, TexCoord);
}"""


class Display:
    """Window that shows a packed pixel buffer on a full-screen quad."""

    def __init__(self, width, height, title="Schwarzschild Black Hole", compute_size=None):
        self.window_width = width
        self.window_height = height
        # Texture size; the quad stretches it over the whole window
        self.width, self.height = compute_size or (width, height)

        if not glfw.init():
            logger.error("Failed to initialize GLFW")
            raise RuntimeError("GLFW init failed")

        glfw.window_hint(glfw.CONTEXT_VERSION_MAJOR, 3)
        glfw.window_hint(glfw.CONTEXT_VERSION_MINOR, 3)
        glfw.window_hint(glfw.OPENGL_PROFILE, glfw.OPENGL_CORE_PROFILE)

        self.window = glfw.create_window(self.window_width, self.window_height, title, None, None)
        if not self.window:
            glfw.terminate()
            logger.error("Failed to create GLFW window")
            raise RuntimeError("Failed to create window")

        glfw.make_context_current(self.window)
        glfw.swap_interval(1)
        logger.info("OpenGL %s", glGetString(GL_VERSION).decode())

        self.create_shaders()
        self.create_texture()
        self.create_quad()

    def create_shaders(self):
        self.program = shaders.compileProgram(
            shaders.compileShader(VERT_SRC, GL_VERTEX_SHADER),
            shaders.compileShader(FRAG_SRC, GL_FRAGMENT_SHADER),
        )

    def create_texture(self):
        self.texture = glGenTextures(1)
        glBindTexture(GL_TEXTURE_2D, self.texture)
        glTexParameteri(GL_TEXTURE_2D, GL_TEXTURE_MIN_FILTER, GL_LINEAR)
        glTexParameteri(GL_TEXTURE_2D, GL_TEXTURE_MAG_FILTER, GL_LINEAR)
        glTexImage2D(GL_TEXTURE_2D, 0, GL_RGBA8, self.width, self.height,
                     0, GL_RGBA, GL_UNSIGNED_BYTE, None)

    def create_quad(self):
        # Row 0 of the buffer is the top of the screen, so v is flipped here
        vertices = np.array([
            -1, 1, 0, 0,  -1, -1, 0, 1,  1, -1, 1, 1,
            -1, 1, 0, 0,   1, -1, 1, 1,  1,  1, 1, 0
        ], dtype=np.float32)

        self.vao = glGenVertexArrays(1)
        vbo = glGenBuffers(1)
        glBindVertexArray(self.vao)
        glBindBuffer(GL_ARRAY_BUFFER, vbo)
        glBufferData(GL_ARRAY_BUFFER, vertices.nbytes, vertices, GL_STATIC_DRAW)
        glVertexAttribPointer(0, 2, GL_FLOAT, GL_FALSE, 16, c_void_p(0))
        glEnableVertexAttribArray(0)
        glVertexAttribPointer(1, 2, GL_FLOAT, GL_FALSE, 16, c_void_p(8))
        glEnableVertexAttribArray(1)

    def update(self, buffer):
        rgba = unpack_rgba(buffer, self.width, self.height)
        glActiveTexture(GL_TEXTURE0)
        glBindTexture(GL_TEXTURE_2D, self.texture)
        glTexSubImage2D(GL_TEXTURE_2D, 0, 0, 0, self.width, self.height,
                        GL_RGBA, GL_UNSIGNED_BYTE, rgba)

        glClear(GL_COLOR_BUFFER_BIT)
        glUseProgram(self.program)
        glBindVertexArray(self.vao)
        glDrawArrays(GL_TRIANGLES, 0, 6)
        glfw.swap_buffers(self.window)

    def should_close(self):
        return glfw.window_should_close(self.window)

    def is_key_pressed(self, key):
        return glfw.get_key(self.window, key) == glfw.PRESS

    def poll(self):
        glfw.poll_events()

    def close(self):
        glfw.terminate()


def bind_camera(window, camera):
    """Forward mouse events from `window` to `camera`."""

    def mouse_button_callback(win, button, action, mods):
        if button == glfw.MOUSE_BUTTON_LEFT:
            camera.on_mouse_button(action == glfw.PRESS)

    def cursor_pos_callback(win, xpos, ypos):
        camera.on_mouse_move(xpos, ypos)

    def scroll_callback(win, xoffset, yoffset):
        camera.on_scroll(yoffset)

    glfw.set_mouse_button_callback(window, mouse_button_callback)
    glfw.set_cursor_pos_callback(window, cursor_pos_callback)
    glfw.set_scroll_callback(window, scroll_callback)
