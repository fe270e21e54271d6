# gbsplayer

Building blocks for playing Game Boy Sound (GBS) music: cartridge memory
mappers, channel status and display helpers, output plugins that write
MIDI, VGM and WAV files or dump sound register writes as text, a
reproducible shuffle/random playlist, command-line option parsing, and a
generator for band-limited impulse tables.

## Installation

```
pip install .
```

For running the tests:

```
pip install .[test]
pytest
```

## Command line

Print the impulse table used for band-limited synthesis as a C-style
header defining `base_impulse`, with 128 shifted impulses of 32 samples
each:

```
gbsplayer-gen-impulse > impulse.h
```

## Library overview

- `gbsplayer.util` – `spack(fmt, *args)` packs integers into bytes using a
  small format language (`<` little endian, `>` big endian, `=` native,
  `{...}` verbatim text, `b`/`w`/`d`/`q` for 8/16/32/64-bit values);
  `fpack` writes the result to a binary file and `fpackat` first seeks to
  an offset. `XorShift64` is the reproducible random generator
  (`seed`, `next`, `rand_long`, `shuffle`) used for playlists.
- `gbsplayer.impulsegen` – `gen_impulsetab(w_shift, n_shift, cutoff)` builds
  the flattened Blackman-windowed sinc impulse table, each impulse summing
  to `IMPULSE_HEIGHT`; `render_impulse_header` renders it as text and
  `main` prints the default table.
- `gbsplayer.notes` – converts a channel frequency divider into a frequency
  (`frequency`) and MIDI note (`midi_note`), and renders tracker-style
  labels such as `C-6` (`note_label`, `channel_label`), volume bars
  (`volume_label`, `reversed_volume_label`) and a sound register dump
  (`register_dump`) for a terminal status line.
- `gbsplayer.status` – `LoopMode` (with `cycle`), `FilterType`, `Endian`,
  `ChannelStatus`, `loop_mode_label` and `display_time`, which turns clock
  ticks and a subsong length into a `DisplayTime` (an unknown length shows
  as 99:99).
- `gbsplayer.mapper` – ROM/RAM banking for GBS images (`mapper_gbs`), GBR
  images (`mapper_gbr`) and MBC1/MBC3 cartridges (`mapper_gb`, which raises
  `ValueError` for other cartridge types). `Mapper.read` and
  `Mapper.write` take cartridge addresses; mapping a bank beyond the end
  of the ROM emits a `RuntimeWarning`.
- `gbsplayer.midifile` – `MidiFile` writes one single-track MIDI file per
  subsong through an `opener(extension, subsong)` callable that returns a
  writable, seekable binary file.
- `gbsplayer.midi_plugouts` – `MidiPlugout` derives notes from sound
  register writes; `AltMidiPlugout` derives them from the channel status
  passed to `step`.
- `gbsplayer.filewriters` – `VgmWriter` logs register writes as VGM,
  `WavWriter` writes 16-bit stereo little endian WAV files, and `IoDumper`
  writes every register write as a text line with the cycle delta in hex.
- `gbsplayer.plugout` – `StdoutWriter` for raw samples, and the plugin
  registry: `available_plugins`, `list_plugins(out)` and
  `select_by_name(name)` (which raises `KeyError` for unknown names). Each
  `OutputPlugin` opens its writer with `open(rate, opener, stdout)`.
- `gbsplayer.player` – `parse_args` for the player's command-line options
  (`-E`, `-f`, `-g`, `-h`, `-H`, `-l`, `-L`, `-o`, `-q`, `-r`, `-R`, `-t`,
  `-T`, `-v`, `-V`, `-z`, `-Z`, `-1` to `-4`, `-c`) into `PlayerOptions`,
  raising `UsageError` on bad input; `usage_text`, `clamp_subsongs`,
  `parse_filter`, `parse_endian`, `swap_endian`, and the linear, shuffle and
  random `Playlist`.

### Example: writing a VGM file

```python
from gbsplayer.filewriters import VgmWriter

def opener(extension, subsong):
    return open(f"song-{subsong + 1}.{extension}", "w+b")

writer = VgmWriter(opener)
writer.skip(0)
writer.io(0, 0xFF26, 0x80)
writer.io(4096, 0xFF12, 0xF3)
writer.close()
```

### Example: a reproducible shuffled playlist

```python
from gbsplayer.player import Playlist, PlayMode

playlist = Playlist(10, PlayMode.SHUFFLE, seed=1234)
first = playlist.start(-1, 1)
second = playlist.next(first)
```

## What this package does not do

The package contains no CPU or sound hardware emulation and does not load
GBS files, so it cannot render music by itself: the output plugins and the
MIDI writers act on register writes, channel status and sample data that a
caller supplies. There is no output to a sound device, no interactive
terminal or graphical player, and no reading of `.gbsplayrc` configuration
files; `parse_args` only records the `-c` file names in
`PlayerOptions.config_files`.