"""S12 Simulator Interactive Demo.

A Gradio web interface for running and inspecting S12 programs.

Usage:
    cd /path/to/s12-sim
    python demo/gradio_app.py

Features:
    - Paste or pick a memory image (binary project format or compact hex)
    - Cap the number of executed instructions
    - See the mnemonic trace and register changes per cycle
    - Inspect the final memory image in project format
"""

import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

import gradio as gr
from s12_sim import S12CPU, InvalidOpcodeError
from s12_sim.exporter import format_memory


PROGRAMS_DIR = Path(__file__).parent.parent / "programs"

# =============================================================================
# Example Programs
# =============================================================================

# Read from PROGRAMS_DIR when selected
EXAMPLE_FILES = {
    "Add two numbers": "sum.mem",
    "Countdown sum 5..1": "countdown.mem",
}

EXAMPLE_PROGRAMS = {
    "Pointer copy": """; Copy M[M[10]] to M[M[11]]
00 610  ; LOADI 10
01 711  ; STOREI 11
02 000  ; HALT
10 020  ; source pointer
11 030  ; destination pointer
20 ABC  ; value to copy""",

    "Negative branch": """; 3 - 4 is negative, JN skips the first HALT
00 410  ; LOAD 10
01 B11  ; SUB 11
02 305  ; JN 05
03 000  ; HALT
05 512  ; STORE 12
06 000  ; HALT
10 003
11 004""",

    "Custom": ""
}


# =============================================================================
# Execution Functions
# =============================================================================

def run_program(image: str, max_cycles: int) -> tuple:
    """Execute a memory image and return results.

    Args:
        image: Memory image text
        max_cycles: Maximum executed instructions

    Returns:
        Tuple of (summary_text, trace_text, memory_text)
    """
    if not image.strip():
        return "Error: No memory image provided", "", ""

    cpu = S12CPU(max_cycles=int(max_cycles))
    cpu.load_image_text(image)

    try:
        executed = cpu.run()
    except InvalidOpcodeError as e:
        error_msg = str(e)
        executed = cpu.get_cycle_count()
    else:
        error_msg = None

    # Format summary
    summary = cpu.get_summary()
    summary_lines = [
        "EXECUTION SUMMARY",
        "=" * 40,
        f"Cycles Executed: {executed}",
        f"Halted: {'Yes' if summary['halted'] else 'No'}",
        f"PC: {summary['pc']}",
        f"ACC: {summary['acc']}",
    ]
    if error_msg:
        summary_lines.append(f"\nRuntime: {error_msg}")
    elif not summary['halted']:
        summary_lines.append("\nStopped at cycle cap")

    summary_text = "\n".join(summary_lines)

    # Format trace
    trace_lines = [
        "EXECUTION TRACE",
        "=" * 60,
    ]
    for entry in cpu.trace[:200]:  # Limit to 200 entries
        line = f"[{entry.cycle:4d}] PC=0x{entry.pc:02X}  {entry.asm():<10}"
        pre_acc = entry.pre_state['acc']
        post_acc = entry.post_state['acc']
        if pre_acc != post_acc:
            line += f"  ACC: 0x{pre_acc:03X} -> 0x{post_acc:03X}"
        trace_lines.append(line)

    if len(cpu.trace) > 200:
        trace_lines.append(f"\n... ({len(cpu.trace) - 200} more entries)")

    trace_text = "\n".join(trace_lines)

    memory_text = format_memory(cpu.state)

    return summary_text, trace_text, memory_text


def load_example(example_name: str) -> str:
    """Load an example program.

    File-backed examples that cannot be read come back empty.
    """
    if example_name in EXAMPLE_FILES:
        try:
            return (PROGRAMS_DIR / EXAMPLE_FILES[example_name]).read_text()
        except OSError:
            return ""
    return EXAMPLE_PROGRAMS.get(example_name, "")


# =============================================================================
# Gradio Interface
# =============================================================================

def create_demo():
    """Create and return the Gradio demo interface."""

    with gr.Blocks(title="S12 Simulator Demo", theme=gr.themes.Soft()) as demo:
        gr.Markdown("""
        # S12 Simulator

        A 12-bit accumulator machine: 256 words of memory, an 8-bit PC,
        a 12-bit ACC and twelve instructions.

        **Cycle**: `fetch M[PC] -> decode opcode/operand -> execute -> PC, ACC, memory`
        """)

        with gr.Row():
            with gr.Column(scale=2):
                gr.Markdown("### Memory Image")

                example_dropdown = gr.Dropdown(
                    choices=list(EXAMPLE_FILES) + list(EXAMPLE_PROGRAMS),
                    value="Add two numbers",
                    label="Load Example"
                )

                image_input = gr.Textbox(
                    value=load_example("Add two numbers"),
                    label="Image",
                    lines=15,
                    placeholder="PPPPPPPP AAAAAAAAAAAA\n00 4A0\n01 000\n..."
                )

                gr.Markdown("### Settings")

                max_cycles = gr.Slider(
                    minimum=1,
                    maximum=10000,
                    value=1000,
                    step=1,
                    label="Max Cycles"
                )

                run_button = gr.Button("Run Program", variant="primary")

            with gr.Column(scale=3):
                with gr.Row():
                    summary_output = gr.Textbox(
                        label="Summary",
                        lines=10,
                        interactive=False
                    )
                    memory_output = gr.Textbox(
                        label="Final Memory Image",
                        lines=10,
                        interactive=False
                    )

                trace_output = gr.Textbox(
                    label="Execution Trace",
                    lines=20,
                    interactive=False
                )

        # ISA Reference
        with gr.Accordion("ISA Reference", open=False):
            gr.Markdown("""
            | Opcode | Instruction | Effect |
            |--------|-------------|--------|
            | `0` | `HALT` | Stop execution |
            | `1` | `ADD addr` | ACC = ACC + M[addr] |
            | `2` | `JZ addr` | Jump if ACC == 0 |
            | `3` | `JN addr` | Jump if ACC bit 11 set |
            | `4` | `LOAD addr` | ACC = M[addr] |
            | `5` | `STORE addr` | M[addr] = ACC |
            | `6` | `LOADI addr` | ACC = M[M[addr]] |
            | `7` | `STOREI addr` | M[M[addr]] = ACC |
            | `8` | `AND addr` | ACC = ACC & M[addr] |
            | `9` | `OR addr` | ACC = ACC \\| M[addr] |
            | `A` | `JMP addr` | Jump |
            | `B` | `SUB addr` | ACC = ACC - M[addr] |

            **Word**: opcode in bits 11-8, address in bits 7-0.
            **Arithmetic** wraps at 12 bits; addresses wrap at 8 bits.
            """)

        with gr.Accordion("Image Formats", open=False):
            gr.Markdown("""
            **Project binary**: optional first line `<8-bit PC> <12-bit ACC>`,
            then `AA WWWWWWWWWWWW` lines.

            **Compact hex**: `AA WWW` lines with up to three hex digits.

            Both may be mixed; `;` and `//` start comments and malformed lines
            are skipped.
            """)

        # Event handlers
        example_dropdown.change(
            fn=load_example,
            inputs=[example_dropdown],
            outputs=[image_input]
        )

        run_button.click(
            fn=run_program,
            inputs=[image_input, max_cycles],
            outputs=[summary_output, trace_output, memory_output]
        )

    return demo


# =============================================================================
# Main
# =============================================================================

if __name__ == "__main__":
    demo = create_demo()
    demo.launch(
        share=False,
        server_name="0.0.0.0",
        server_port=7861,
        show_error=True
    )
