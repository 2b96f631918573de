import base64
import gzip
import zlib

import numpy as np
import pytest

from tmx_mesher.textures import FixedTextureProvider


def encode_ids(ids, compression=""):
    """Encode raw ids the way Tiled writes base64 tile data."""
    raw = np.asarray(ids, dtype='<u4').tobytes()
    if compression == "zlib":
        raw = zlib.compress(raw)
    elif compression == "gzip":
        raw = gzip.compress(raw)
    return base64.b64encode(raw).decode('ascii')


@pytest.fixture
def texture_provider():
    """Known texture sizes, no files needed."""
    return FixedTextureProvider({
        "terrain.png": (64, 64),
        "props.png": (32, 32),
    })


@pytest.fixture
def sample_tmx():
    """
    3x2 orthogonal map with two tilesets, two tile layers sharing a name
    and one object layer.

    terrain.png (64x64, 32px tiles) -> GIDs 1..4
    props.png   (32x32, size from provider) -> GID 5
    """
    flipped = encode_ids([0x80000001, 0, 0, 0, 0, 4], "zlib")
    return f"""<?xml version="1.0" encoding="UTF-8"?>
<map version="1.2" orientation="orthogonal" width="3" height="2"
     tilewidth="32" tileheight="32">
  <properties>
    <property name="Gravity" type="float" value="9.8"/>
  </properties>
  <tileset firstgid="1" name="terrain" tilewidth="32" tileheight="32">
    <image source="terrain.png" width="64" height="64" trans="ff00ff"/>
    <tile id="1">
      <properties>
        <property name="Solid" type="bool" value="true"/>
      </properties>
    </tile>
  </tileset>
  <tileset firstgid="5" name="props" tilewidth="32" tileheight="32">
    <image source="props.png"/>
  </tileset>
  <layer name="Ground" width="3" height="2">
    <data encoding="csv">
1,2,0,
0,3,5
    </data>
  </layer>
  <layer name="Ground" width="3" height="2" opacity="0.5">
    <data encoding="base64" compression="zlib">
      {flipped}
    </data>
  </layer>
  <objectgroup name="Walls">
    <object name="crate" x="32" y="32" width="64" height="32"/>
    <object name="pond" x="0" y="0" width="64" height="32"><ellipse/></object>
    <object name="room" x="0" y="0"><polygon points="0,0 32,0 32,32 0,32"/></object>
    <object name="stub" x="0" y="0"><polyline points="0,0"/></object>
    <object x="0" y="32" width="32" height="32" gid="2147483653"/>
  </objectgroup>
</map>
"""


@pytest.fixture
def sample_map(sample_tmx, texture_provider):
    from tmx_mesher.map.document import Map

    return Map.from_string(sample_tmx, texture_provider=texture_provider)
