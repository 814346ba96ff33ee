import json
import matplotlib.pyplot as plt
import numpy as np
import sys
import glob

# --- CONFIGURATION ---
# Auto-detect the most recent JSON file if not specified
if len(sys.argv) > 1:
    target_file = sys.argv[1]
else:
    json_files = glob.glob("randgen_*.json")
    if not json_files:
        print("❌ No randgen_*.json files found! Run examples/run_random_gen.py first.")
        sys.exit(1)
    target_file = sorted(json_files)[-1] # Pick the latest one
print(f"🔍 Analyzing: {target_file}")

with open(target_file, 'r') as f:
    data = json.load(f)

# Extract Data
zero_fractions = np.array(data['zero_fractions'])
per_unit = np.array(data['per_unit_zero'])
expected = data['expected_zero']
samples = np.arange(len(zero_fractions))

# Running mean shows convergence towards the prepared probability
running = np.cumsum(zero_fractions) / (samples + 1)

# --- PLOTTING ---
plt.style.use('dark_background')
fig = plt.figure(figsize=(15, 10))
plt.suptitle(f"VQBIT RANDOM VALUE SETS ({data['mode']})\n"
             f"{data['size']} units x {data['samples']} samples | "
             f"Duplicates: {len(data['duplicates'])} | Z-Score: {data['z_score']:.2f}σ",
             fontsize=16, color='#00ff41', fontweight='bold')

# PANEL 1: ZERO FRACTION PER VALUE SET
ax1 = plt.subplot(2, 2, 1)
ax1.plot(samples, zero_fractions, '.', color='#ff00ff', alpha=0.6, label='Per value set')
ax1.plot(samples, running, '-', color='#00ff41', linewidth=3, label='Running mean')
ax1.axhline(y=expected, color='red', linestyle='--', label=f'Expected ({expected})')
ax1.set_title("Zero Fraction per Measurement", fontsize=12, color='white')
ax1.set_xlabel("Sample", fontsize=10)
ax1.set_ylabel("Fraction of 0", fontsize=10)
ax1.grid(True, alpha=0.3)
ax1.legend()

# PANEL 2: HISTOGRAM
ax2 = plt.subplot(2, 2, 2)
ax2.hist(zero_fractions, bins=20, color='#00ff41', alpha=0.8)
ax2.axvline(x=expected, color='red', linestyle='--')
ax2.set_title("Distribution of Zero Fractions", fontsize=12, color='white')
ax2.set_xlabel("Fraction of 0", fontsize=10)
ax2.set_ylabel("Value sets", fontsize=10)

# PANEL 3: PER-UNIT FREQUENCY
ax3 = plt.subplot(2, 1, 2)
colors = ['#00ff41' if abs(p - expected) < 0.1 else '#ff00ff' for p in per_unit]
ax3.bar(np.arange(len(per_unit)), per_unit, color=colors, alpha=0.8)
ax3.axhline(y=expected, color='red', linestyle='--', label='Expected')
ax3.set_title("Zero Frequency per Unit", fontsize=12, color='white')
ax3.set_xlabel("Unit index", fontsize=10)
ax3.set_ylim(0, 1)
ax3.legend()

plt.tight_layout(rect=[0, 0.03, 1, 0.95])
output_filename = f"randgen_{data['mode']}_{data['timestamp']}.png"
plt.savefig(output_filename, dpi=300, facecolor='black')
print(f"🚀 Visualizations saved to: {output_filename}")
plt.show()
